"""
Couche application : sessions, authentification et journal d'audit.
"""
