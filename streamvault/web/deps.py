"""
Dépendances partagées de l'application web.

Expose l'AuthGate sous forme de dépendances FastAPI :
- current_session : session résolue depuis le cookie signé (None si anonyme)
- require_auth / require_role(role) / require_csrf : exigences par endpoint
- admin_rate_limit : limitation des requêtes d'administration
- http_error_for : conversion des erreurs du coeur en HTTPException
"""

import json
from typing import Awaitable, Callable, Optional

from fastapi import Depends, HTTPException, Request, Response

from streamvault.container import Container
from streamvault.core.entities import Role, SessionRecord
from streamvault.core.errors import (
    AuthError,
    ConflictError,
    CsrfError,
    DecodeError,
    ForbiddenError,
    LockTimeoutError,
    NotFoundError,
    StreamVaultError,
    ValidationError,
)
from streamvault.utils.constants import CSRF_BODY_FIELD, CSRF_HEADER_NAME, SESSION_COOKIE_NAME


def http_error_for(exc: StreamVaultError) -> HTTPException:
    """Convertit une erreur du coeur en HTTPException (statut et détail)."""
    if isinstance(exc, ValidationError):
        return HTTPException(400, detail={"error": "Invalid payload", "details": exc.details})
    if isinstance(exc, NotFoundError):
        return HTTPException(404, detail={"error": str(exc)})
    if isinstance(exc, ConflictError):
        return HTTPException(409, detail={"error": str(exc)})
    if isinstance(exc, ForbiddenError):
        return HTTPException(403, detail={"error": "Forbidden"})
    if isinstance(exc, AuthError):
        return HTTPException(401, detail={"error": str(exc) or "Unauthorized"})
    if isinstance(exc, CsrfError):
        return HTTPException(400, detail={"error": str(exc)})
    if isinstance(exc, LockTimeoutError):
        return HTTPException(503, detail={"error": "Resource busy, retry later"})
    if isinstance(exc, DecodeError):
        return HTTPException(500, detail={"error": "Stored document is unreadable"})
    return HTTPException(500, detail={"error": "Internal error"})


def get_container(request: Request) -> Container:
    """Container DI initialisé par le lifespan de l'application."""
    return request.app.state.container


async def current_session(request: Request, response: Response) -> Optional[SessionRecord]:
    """
    Résout la session de la requête.

    Un cookie présent mais refusé (signature, session expirée ou inconnue)
    est effacé côté client.
    """
    container = get_container(request)
    raw_cookie = request.cookies.get(SESSION_COOKIE_NAME)
    try:
        session = await container.auth_gate().resolve(raw_cookie)
    except StreamVaultError as exc:
        raise http_error_for(exc) from exc
    if raw_cookie and session is None:
        response.headers.append("set-cookie", container.session_service().clear_cookie())
    return session


async def require_auth(
    session: Optional[SessionRecord] = Depends(current_session),
) -> SessionRecord:
    """Exige une session valide (401 sinon)."""
    if session is None:
        raise http_error_for(AuthError("Unauthorized"))
    return session


def require_role(role: Role) -> Callable[..., Awaitable[SessionRecord]]:
    """Fabrique une dépendance exigeant un rôle ; admin satisfait toute exigence."""

    async def dependency(
        request: Request,
        session: Optional[SessionRecord] = Depends(current_session),
    ) -> SessionRecord:
        try:
            return get_container(request).auth_gate().require_role(session, role)
        except AuthError as exc:
            raise http_error_for(exc) from exc

    return dependency


async def _csrf_token_from(request: Request) -> Optional[str]:
    """Jeton CSRF depuis l'en-tête X-CSRF-Token, sinon le champ csrfToken du corps JSON."""
    token = request.headers.get(CSRF_HEADER_NAME)
    if token:
        return token
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if isinstance(body, dict) and isinstance(body.get(CSRF_BODY_FIELD), str):
        return body[CSRF_BODY_FIELD]
    return None


async def require_csrf(
    request: Request,
    session: Optional[SessionRecord] = Depends(current_session),
) -> SessionRecord:
    """Exige une session et un jeton CSRF identique à son secret."""
    token = await _csrf_token_from(request)
    try:
        return get_container(request).auth_gate().require_csrf(session, token)
    except StreamVaultError as exc:
        raise http_error_for(exc) from exc


async def admin_rate_limit(request: Request) -> None:
    """Refuse avec 429 au-delà de la limite des requêtes d'administration."""
    limiter = get_container(request).admin_rate_limiter()
    key = request.client.host if request.client else "anonymous"
    retry_after = limiter.hit(key)
    if retry_after is not None:
        raise HTTPException(
            429,
            detail={"error": "Too many admin requests, please slow down."},
            headers={"Retry-After": str(retry_after)},
        )
