"""API dependencies."""

from __future__ import annotations

from collections.abc import Generator
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlmodel import Session

from dspforms.core.config import settings
from dspforms.core.identity import Identity, IdentityProvider, extract_access_token
from dspforms.db.session import get_session_dep


def get_db() -> Generator[Session, None, None]:
    yield from get_session_dep()


def get_identity_provider() -> IdentityProvider:
    return IdentityProvider()


def get_access_token(
    request: Request, authorization: Optional[str] = Header(None)
) -> Optional[str]:
    return extract_access_token(authorization, request.cookies.get(settings.session_cookie_name))


def get_current_user(
    token: Optional[str] = Depends(get_access_token),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Optional[Identity]:
    """Resolve the caller once per request; None means anonymous."""
    if not token:
        return None
    return provider.get_user(token)


def require_user(user: Optional[Identity] = Depends(get_current_user)) -> Identity:
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user


def require_admin(user: Identity = Depends(require_user)) -> Identity:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return user


__all__ = [
    "get_access_token",
    "get_current_user",
    "get_db",
    "get_identity_provider",
    "require_admin",
    "require_user",
]
