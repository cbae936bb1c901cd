"""
Couche domaine (core).

Contient les entités métier, ports (interfaces abstraites) et la taxonomie d'erreurs.
Cette couche n'a AUCUNE dépendance vers l'infrastructure (fichiers, frameworks web).

Sous-packages :
- entities/ : Entités validées (Movie, Series, SessionRecord, HistoryEntry...)
- ports/ : Interfaces abstraites définissant les contrats pour les adaptateurs
- errors : Erreurs typées remontées par le coeur
"""
