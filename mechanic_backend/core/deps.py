from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from mechanic_backend.core.config import settings
from mechanic_backend.core.errors import Forbidden, NotFound, Unauthorized
from mechanic_backend.core.security import decode_token
from mechanic_backend.db.session import get_db
from mechanic_backend.models.user import User


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str
    email: str | None = None


bearer = HTTPBearer(auto_error=False)


def _extract_token(request: Request, creds: HTTPAuthorizationCredentials | None) -> str:
    """
    Bearer header wins. The session cookie is only consulted when there is
    no Authorization header at all; a malformed header is rejected outright.
    """
    if creds is not None:
        token = creds.credentials.strip()
    elif "Authorization" in request.headers:
        raise Unauthorized("Unauthorized")
    else:
        token = (request.cookies.get(settings.session_cookie_name) or "").strip()

    if not token:
        raise Unauthorized("Unauthorized")
    return token


def get_current_principal(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> Principal:
    token = _extract_token(request, creds)
    try:
        payload = decode_token(token)
    except Exception as e:
        raise Unauthorized("Unauthorized", details=str(e))

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Unauthorized", details="Token has no subject")

    user = db.get(User, str(user_id))
    if not user:
        raise NotFound("User not found")
    if not user.is_active:
        raise Unauthorized("Unauthorized", details="User is inactive")
    return Principal(user_id=user.id, role=user.role, email=user.email)


def require_roles(*allowed: str, message: str = "No access for your role"):
    """Role gate, applied after identity resolution."""

    def _inner(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role in allowed:
            return principal
        raise Forbidden(message)

    return _inner


def ensure_owner_or_roles(
    owner_id: str | None,
    principal: Principal,
    roles: tuple[str, ...] = (),
    message: str = "Forbidden",
    details: str | None = None,
) -> None:
    """
    Ownership gate shared by payments, notifications and reviews:
    the caller passes if they own the row or hold one of `roles`.
    """
    if owner_id is not None and owner_id == principal.user_id:
        return
    if principal.role in roles:
        return
    raise Forbidden(message, details=details)
