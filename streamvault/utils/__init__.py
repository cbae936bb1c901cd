"""Utilitaires partagés (constantes, slugs, horodatages)."""
