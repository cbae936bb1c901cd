"""
Persistance par documents JSON.

Ce package fournit :
- FileLock : Verrou consultatif par fichier sentinelle
- JsonDocumentStore : Lecture, écriture atomique (temp + rename) et ajout de lignes
- DataPaths : Disposition des documents sous le répertoire de données
- repositories/ : Stores du catalogue, de l'historique et des comptes
"""

from streamvault.infrastructure.persistence.document_store import JsonDocumentStore
from streamvault.infrastructure.persistence.file_lock import FileLock, LockSettings
from streamvault.infrastructure.persistence.paths import DataPaths

__all__ = ["DataPaths", "FileLock", "JsonDocumentStore", "LockSettings"]
