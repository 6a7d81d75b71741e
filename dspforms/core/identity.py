"""Client for the external identity provider and request-scoped identity helpers.

The auth server speaks the GoTrue REST API (the one Supabase exposes under
``/auth/v1``). Nothing here caches the current user; each request resolves
its own identity from the bearer token or the session cookie.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from dspforms.core.config import settings
from dspforms.core.errors import IdentityProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    is_admin: bool = False

    @property
    def handle(self) -> str:
        """Short name shown in the header (the local part of the email)."""
        if self.email:
            return self.email.split("@")[0]
        return self.display_name or self.id

    @classmethod
    def from_user_payload(cls, payload: dict[str, Any]) -> "Identity":
        metadata = payload.get("user_metadata") or {}
        return cls(
            id=str(payload["id"]),
            email=payload.get("email"),
            display_name=metadata.get("full_name"),
            # Anything other than a literal true is a regular user
            is_admin=metadata.get("is_admin") is True,
        )


class IdentityProvider:
    """Thin wrapper around the auth server HTTP API."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.auth_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.auth_api_key
        self.timeout = timeout or settings.auth_timeout

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"apikey": self.api_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        access_token: str | None = None,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        if not self.configured:
            raise IdentityProviderError("Identity provider is not configured", status_code=503)
        url = f"{self.base_url}/auth/v1{path}"
        try:
            logger.debug("Auth request: %s %s", method, url)
            response = httpx.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(access_token),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Auth server rejected %s %s: %s", method, path, exc.response.status_code
            )
            raise IdentityProviderError(
                f"Auth server rejected the request ({exc.response.status_code})",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            logger.error("Auth server connection error: %s", exc)
            raise IdentityProviderError(f"Failed to reach auth server: {exc}") from exc

        if not response.content:
            return None
        return response.json()

    def get_user(self, access_token: str) -> Identity | None:
        """Return the identity behind an access token, or None if it is not valid."""
        if not access_token or not self.configured:
            return None
        try:
            payload = self._request("GET", "/user", access_token=access_token)
        except IdentityProviderError:
            logger.info("Treating request as anonymous after failed token lookup")
            return None
        if not payload or "id" not in payload:
            return None
        return Identity.from_user_payload(payload)

    def sign_in(self, email: str, password: str) -> str:
        """Exchange email/password for an access token."""
        payload = self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        token = (payload or {}).get("access_token")
        if not token:
            raise IdentityProviderError("Auth server returned no access token")
        return token

    def sign_up(self, email: str, password: str, full_name: str | None = None) -> None:
        body: dict[str, Any] = {"email": email, "password": password}
        if full_name:
            body["data"] = {"full_name": full_name}
        self._request("POST", "/signup", json=body)

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "/logout", access_token=access_token)


def extract_access_token(authorization: str | None, cookie_value: str | None) -> str | None:
    """Pick the bearer token from the Authorization header, else the session cookie."""
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    return cookie_value or None


__all__ = ["Identity", "IdentityProvider", "extract_access_token"]
