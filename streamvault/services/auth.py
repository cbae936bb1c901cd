"""
Authentification, administration des comptes et contrôle d'accès.

AuthService : connexion/déconnexion et gestion des comptes, avec audit.
AuthGate : contrôle par requête (session, rôle, CSRF) consommé par la
couche de routage.

Règle de rôle : une session admin satisfait toute exigence de rôle
(admin ⊇ user). Ce comportement est voulu.
"""

from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger

from streamvault.core.entities import (
    AuditAction,
    LoginInput,
    Role,
    SessionRecord,
    UserCreate,
    UserRecord,
    UserUpdate,
    parse_model,
)
from streamvault.core.errors import AuthError, ConflictError, ForbiddenError, NotFoundError
from streamvault.core.ports.repositories import IUserRepository
from streamvault.services.audit import AuditLog
from streamvault.services.passwords import PasswordHasher
from streamvault.services.session import SessionService
from streamvault.utils.helpers import utc_now

_INVALID_CREDENTIALS = "Invalid credentials"


@dataclass
class LoginResult:
    """
    Résultat d'une connexion réussie.

    Attributs:
        user: Compte authentifié
        session: Session créée
        cookie: En-tête Set-Cookie à renvoyer au client
    """

    user: UserRecord
    session: SessionRecord
    cookie: str


class AuthService:
    """
    Service de connexion et d'administration des comptes.

    Toute tentative de connexion, réussie ou non, est tracée dans le journal d'audit.
    """

    def __init__(
        self,
        users: IUserRepository,
        sessions: SessionService,
        audit: AuditLog,
        hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._audit = audit
        self._hasher = hasher

    async def login(self, credentials: LoginInput | dict[str, Any]) -> LoginResult:
        """
        Authentifie un utilisateur et ouvre une session.

        Raises:
            ValidationError: Si les identifiants sont mal formés
            AuthError: Compte inconnu, désactivé ou mot de passe faux
                (aucune session n'est créée)
        """
        login = parse_model(LoginInput, credentials)
        user = await self._users.find(login.username)
        valid = (
            user is not None
            and user.active
            and await self._hasher.verify(login.password, user.password_hash)
        )
        if not valid:
            await self._audit.record(
                login.username, AuditAction.LOGIN, "user",
                {"success": False, "reason": "invalid credentials"},
            )
            logger.warning(f"Connexion refusee: {login.username}")
            raise AuthError(_INVALID_CREDENTIALS)

        session = await self._sessions.create(user.username, user.role)
        await self._audit.record(user.username, AuditAction.LOGIN, "user", {"success": True})
        logger.info(f"Connexion reussie: {user.username}")
        return LoginResult(user=user, session=session, cookie=self._sessions.serialize_cookie(session.id))

    async def logout(self, session: SessionRecord) -> str:
        """Révoque la session et retourne l'en-tête Set-Cookie d'effacement."""
        await self._sessions.invalidate(session.id)
        await self._audit.record(session.username, AuditAction.LOGOUT, "user", {})
        return self._sessions.clear_cookie()

    async def create_user(self, actor: str, data: UserCreate | dict[str, Any]) -> UserRecord:
        """
        Crée un compte.

        Raises:
            ConflictError: Si le nom existe déjà (sans tenir compte de la casse)
        """
        request = parse_model(UserCreate, data)
        if await self._users.find(request.username) is not None:
            raise ConflictError(f"User already exists: {request.username}")
        now = utc_now()
        record = UserRecord(
            username=request.username,
            password_hash=await self._hasher.hash(request.password),
            role=request.role,
            active=True,
            created_at=now,
            updated_at=now,
            force_password_reset=False,
        )
        record = await self._users.upsert(record)
        await self._audit.record(actor, AuditAction.CREATE_USER, record.username, {"role": record.role.value})
        return record

    async def update_user(
        self, actor: str, username: str, data: UserUpdate | dict[str, Any]
    ) -> UserRecord:
        """
        Modifie un compte ; les champs non fournis sont conservés.

        Désactiver un compte, changer son mot de passe ou son rôle révoque ses
        sessions : le rôle est figé dans chaque session à sa création.

        Raises:
            NotFoundError: Si le compte n'existe pas
        """
        changes = parse_model(UserUpdate, data)
        user = await self._users.find(username)
        if user is None:
            raise NotFoundError("user", username)

        fields = sorted(changes.model_dump(exclude_none=True, by_alias=True))
        updates: dict[str, Any] = {}
        if changes.password is not None:
            updates["password_hash"] = await self._hasher.hash(changes.password)
        for field in ("active", "force_password_reset", "role"):
            value = getattr(changes, field)
            if value is not None:
                updates[field] = value
        updated = await self._users.upsert(user.model_copy(update=updates))

        role_changed = changes.role is not None and changes.role != user.role
        if changes.password is not None or not updated.active or role_changed:
            await self._sessions.revoke_user(updated.username)
        action = AuditAction.RESET_PASSWORD if fields == ["password"] else AuditAction.UPDATE_USER
        await self._audit.record(actor, action, updated.username, {"fields": fields})
        return updated

    async def delete_user(self, actor: str, username: str) -> None:
        """Supprime un compte et ses sessions. Idempotent."""
        await self._users.delete(username)
        await self._sessions.revoke_user(username)
        await self._audit.record(actor, AuditAction.DISABLE_USER, username, {})

    async def list_users(self) -> list[UserRecord]:
        return await self._users.list_all()


class AuthGate:
    """
    Contrôle d'accès par requête.

    Résout la session depuis le cookie signé puis applique les exigences
    d'authentification, de rôle et de jeton CSRF.
    """

    def __init__(self, sessions: SessionService) -> None:
        self._sessions = sessions

    async def resolve(self, raw_cookie: Optional[str]) -> Optional[SessionRecord]:
        """
        Session associée au cookie, prolongée, ou None (requête anonyme).

        Cookie absent, mal formé, signature invalide, session inconnue ou
        expirée : la requête est anonyme.
        """
        session_id = self._sessions.parse_cookie(raw_cookie)
        if session_id is None:
            return None
        session = await self._sessions.get(session_id)
        if session is None:
            return None
        return await self._sessions.touch(session_id) or session

    @staticmethod
    def require_auth(session: Optional[SessionRecord]) -> SessionRecord:
        """Raises: AuthError si la requête est anonyme."""
        if session is None:
            raise AuthError("Unauthorized")
        return session

    @classmethod
    def require_role(cls, session: Optional[SessionRecord], role: Role) -> SessionRecord:
        """
        Exige un rôle ; une session admin satisfait toute exigence.

        Raises:
            AuthError: Si la requête est anonyme
            ForbiddenError: Si le rôle est insuffisant
        """
        session = cls.require_auth(session)
        if session.role != role and session.role != Role.ADMIN:
            raise ForbiddenError("Forbidden")
        return session

    def require_csrf(self, session: Optional[SessionRecord], token: Optional[str]) -> SessionRecord:
        """
        Exige un jeton CSRF identique au secret de la session.

        Raises:
            AuthError: Si la requête est anonyme
            CsrfError: Si le jeton est absent ou différent
        """
        session = self.require_auth(session)
        self._sessions.require_csrf(session, token)
        return session
