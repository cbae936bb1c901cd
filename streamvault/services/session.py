"""
Service de sessions d'authentification.

Cycle de vie d'une session :
- Active -> Active : touch() repousse l'expiration à maintenant + TTL
- Active -> Expirée : détecté paresseusement au prochain chargement
- Active -> Révoquée : invalidate() (déconnexion) ou revoke_user()

Les sessions expirées sont retirées de sessions.json à chaque chargement
qui en trouve, et la collection purgée est réécrite.

Cookie : session=<identifiant hex>.<signature HMAC-SHA256 hex>. La
vérification et la comparaison des jetons CSRF sont à temps constant.
"""

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta
from email.utils import format_datetime
from typing import Optional

from loguru import logger

from streamvault.core.entities import Role, SessionRecord, parse_model
from streamvault.core.errors import CsrfError, DecodeError
from streamvault.core.ports.document_store import IDocumentStore
from streamvault.infrastructure.persistence.paths import DataPaths
from streamvault.utils.constants import CSRF_TOKEN_BYTES, SESSION_COOKIE_NAME, SESSION_ID_BYTES
from streamvault.utils.helpers import utc_now

SESSION_TTL = timedelta(days=7)


def constant_time_equals(left: str, right: str) -> bool:
    """Comparaison à temps constant ; des longueurs différentes sont un échec, pas une erreur."""
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


class SessionService:
    """
    Émission, validation, prolongation et révocation des sessions.

    Utilisation:
        sessions = SessionService(store, paths, secret="...")
        record = await sessions.create("alice", Role.USER)
        cookie = sessions.serialize_cookie(record.id)
        session_id = sessions.parse_cookie(raw_cookie_value)
    """

    def __init__(
        self,
        store: IDocumentStore,
        paths: DataPaths,
        secret: str,
        ttl: timedelta = SESSION_TTL,
        secure_cookies: bool = False,
    ) -> None:
        """
        Initialise le service.

        Args:
            store: Store de documents portant sessions.json
            paths: Disposition des fichiers de données
            secret: Clé serveur de signature des identifiants
            ttl: Durée de vie d'une session depuis sa dernière activité
            secure_cookies: Ajoute l'attribut Secure aux cookies (hors développement)
        """
        self._store = store
        self._path = paths.sessions_file
        self._secret = secret.encode("utf-8")
        self._ttl = ttl
        self._secure_cookies = secure_cookies

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    async def _load(self) -> list[SessionRecord]:
        payload = await self._store.read(self._path, {"sessions": []})
        if not isinstance(payload, dict) or not isinstance(payload.get("sessions", []), list):
            raise DecodeError(self._path, "expected an object with a sessions list")
        return [parse_model(SessionRecord, item) for item in payload.get("sessions", [])]

    async def _save(self, sessions: list[SessionRecord]) -> None:
        await self._store.write_unlocked(
            self._path, {"sessions": [session.to_document() for session in sessions]}
        )

    @staticmethod
    def _active(sessions: list[SessionRecord], now: datetime) -> list[SessionRecord]:
        return [session for session in sessions if session.is_active(now)]

    async def create(self, username: str, role: Role) -> SessionRecord:
        """Crée une session avec identifiant et secret CSRF aléatoires."""
        now = utc_now()
        session = SessionRecord(
            id=secrets.token_hex(SESSION_ID_BYTES),
            username=username,
            role=role,
            created_at=now,
            expires_at=now + self._ttl,
            csrf_token=secrets.token_hex(CSRF_TOKEN_BYTES),
        )
        async with self._store.lock(self._path):
            sessions = self._active(await self._load(), now)
            sessions.append(session)
            await self._save(sessions)
        logger.info(f"Session creee pour {username} ({role.value})")
        return session

    async def get(self, session_id: str) -> Optional[SessionRecord]:
        """Retourne la session si elle est valide ; purge les sessions expirées."""
        now = utc_now()
        sessions = await self._load()
        active = self._active(sessions, now)
        if len(active) != len(sessions):
            async with self._store.lock(self._path):
                current = await self._load()
                remaining = self._active(current, now)
                if len(remaining) != len(current):
                    await self._save(remaining)
                    logger.debug(f"{len(current) - len(remaining)} session(s) expiree(s) purgee(s)")
        return next((session for session in active if session.id == session_id), None)

    async def touch(self, session_id: str) -> Optional[SessionRecord]:
        """Repousse l'expiration d'une session encore valide ; ne la raccourcit jamais."""
        async with self._store.lock(self._path):
            now = utc_now()
            sessions = await self._load()
            touched: Optional[SessionRecord] = None
            for index, session in enumerate(sessions):
                if session.id == session_id and session.is_active(now):
                    expires_at = max(session.expires_at, now + self._ttl)
                    touched = session.model_copy(update={"expires_at": expires_at})
                    sessions[index] = touched
            if touched is not None:
                await self._save(sessions)
        return touched

    async def invalidate(self, session_id: str) -> None:
        """Supprime la session sans condition."""
        async with self._store.lock(self._path):
            sessions = [session for session in await self._load() if session.id != session_id]
            await self._save(sessions)

    async def revoke_user(self, username: str) -> int:
        """Supprime toutes les sessions d'un utilisateur. Retourne le nombre révoqué."""
        async with self._store.lock(self._path):
            sessions = await self._load()
            remaining = [
                session for session in sessions
                if session.username.casefold() != username.casefold()
            ]
            revoked = len(sessions) - len(remaining)
            if revoked:
                await self._save(remaining)
        if revoked:
            logger.info(f"{revoked} session(s) revoquee(s) pour {username}")
        return revoked

    # ------------------------------------------------------------------
    # Signature et cookie
    # ------------------------------------------------------------------

    def sign_identifier(self, session_id: str) -> str:
        """Signature HMAC-SHA256 hexadécimale de l'identifiant."""
        return hmac.new(self._secret, session_id.encode("utf-8"), hashlib.sha256).hexdigest()

    def cookie_value(self, session_id: str) -> str:
        """Valeur du cookie : identifiant.signature."""
        return f"{session_id}.{self.sign_identifier(session_id)}"

    def serialize_cookie(self, session_id: str) -> str:
        """En-tête Set-Cookie complet pour une session."""
        expires = format_datetime(utc_now() + self._ttl, usegmt=True)
        parts = [
            f"{SESSION_COOKIE_NAME}={self.cookie_value(session_id)}",
            "Path=/",
            "HttpOnly",
            "SameSite=Strict",
            f"Expires={expires}",
        ]
        if self._secure_cookies:
            parts.append("Secure")
        return "; ".join(parts)

    def clear_cookie(self) -> str:
        """En-tête Set-Cookie qui efface le cookie de session."""
        parts = [f"{SESSION_COOKIE_NAME}=", "Path=/", "HttpOnly", "Max-Age=0", "SameSite=Strict"]
        if self._secure_cookies:
            parts.append("Secure")
        return "; ".join(parts)

    def parse_cookie(self, raw_cookie: Optional[str]) -> Optional[str]:
        """
        Vérifie un cookie et retourne l'identifiant de session.

        Retourne None si le cookie est absent, mal formé (pas de '.') ou si
        la signature ne correspond pas exactement, longueur comprise.
        """
        if not raw_cookie:
            return None
        session_id, separator, signature = raw_cookie.partition(".")
        if not separator or not session_id or not signature:
            return None
        if not constant_time_equals(signature, self.sign_identifier(session_id)):
            return None
        return session_id

    def require_csrf(self, session: SessionRecord, token: Optional[str]) -> None:
        """
        Vérifie le jeton CSRF fourni contre le secret de la session.

        Raises:
            CsrfError: Si le jeton est absent ou différent
        """
        if not token:
            raise CsrfError("Missing CSRF token")
        if not constant_time_equals(session.csrf_token, token):
            raise CsrfError("Invalid CSRF token")
