"""
StreamVault - Coeur de persistance d'un catalogue de streaming multi-utilisateurs.

Ce package fournit la couche de durabilite et de concurrence sous le catalogue :
documents JSON proteges par verrou, sessions signees avec secret CSRF,
fusion incrementale des episodes dans les series.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, erreurs)
- services/ : Couche application (sessions, authentification, audit)
- infrastructure/ : Stockage fichiers (verrous, écriture atomique, repositories)
- web/ : Dépendances FastAPI consommées par la couche de routage
"""
