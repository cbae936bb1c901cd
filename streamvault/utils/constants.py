"""
Constantes globales pour StreamVault.

Ce module contient les constantes partagees par les composants :
- Domaines autorises pour les URLs de flux et de sous-titres
- Noms du cookie de session et de l'en-tete CSRF
- Tailles des secrets aleatoires
"""

# Hotes acceptes pour streamUrl et les sous-titres (sous-domaines inclus)
DEFAULT_ALLOWED_VIDEO_DOMAINS = (
    "localhost",
    "127.0.0.1",
    "example.com",
    "cdn.example.com",
    "stream.mediacdn.local",
)

SESSION_COOKIE_NAME = "session"
CSRF_HEADER_NAME = "X-CSRF-Token"
CSRF_BODY_FIELD = "csrfToken"

# Octets aleatoires (encodes en hexadecimal)
SESSION_ID_BYTES = 32
CSRF_TOKEN_BYTES = 48

AUDIT_SEPARATOR = " | "
