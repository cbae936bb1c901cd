"""
Couche infrastructure : implémentations concrètes des ports du domaine.
"""
