"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour la couche web et les tests.
Toute la configuration (chemins, secret, verrous) provient d'un unique Settings
passe explicitement aux composants.
"""

from datetime import timedelta

from dependency_injector import containers, providers

from .config import Settings
from .infrastructure.persistence.document_store import JsonDocumentStore
from .infrastructure.persistence.repositories import (
    JsonCatalogRepository,
    JsonHistoryRepository,
    JsonUserRepository,
)
from .services.audit import AuditLog
from .services.auth import AuthGate, AuthService
from .services.passwords import PasswordHasher
from .services.rate_limit import RateLimiter
from .services.session import SessionService


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.config.override(providers.Object(Settings(data_dir=...)))
        catalog = container.catalog_repository()
        gate = container.auth_gate()
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Store de documents - Singleton, seul composant touchant le systeme de fichiers
    document_store = providers.Singleton(
        JsonDocumentStore,
        lock_settings=config.provided.lock_settings,
    )

    # Repositories - Singletons sans etat propre hors compteurs
    catalog_repository = providers.Singleton(
        JsonCatalogRepository,
        store=document_store,
        paths=config.provided.paths,
        allowed_domains=config.provided.allowed_video_domains,
    )
    history_repository = providers.Singleton(
        JsonHistoryRepository,
        store=document_store,
        paths=config.provided.paths,
    )
    user_repository = providers.Singleton(
        JsonUserRepository,
        store=document_store,
        paths=config.provided.paths,
    )

    # Sessions et audit
    session_service = providers.Singleton(
        SessionService,
        store=document_store,
        paths=config.provided.paths,
        secret=config.provided.session_secret,
        ttl=providers.Callable(timedelta, days=config.provided.session_ttl_days),
        secure_cookies=config.provided.secure_cookies,
    )
    audit_log = providers.Singleton(
        AuditLog,
        store=document_store,
        paths=config.provided.paths,
    )

    # Authentification
    password_hasher = providers.Singleton(PasswordHasher)
    auth_service = providers.Factory(
        AuthService,
        users=user_repository,
        sessions=session_service,
        audit=audit_log,
        hasher=password_hasher,
    )
    auth_gate = providers.Singleton(AuthGate, sessions=session_service)

    # Limitation des requetes d'administration - etat partage par processus
    admin_rate_limiter = providers.Singleton(
        RateLimiter,
        limit=config.provided.admin_rate_limit,
        window_seconds=config.provided.admin_rate_window_seconds,
    )
