"""
Adaptateur web : dépendances FastAPI du contrôle d'accès.

La couche de routage (hors de ce package) monte ses routes sur l'application
créée par create_app et déclare ces dépendances sur ses endpoints.
"""
