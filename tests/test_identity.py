"""Tests for the identity provider client."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from dspforms.core.errors import IdentityProviderError
from dspforms.core.identity import Identity, IdentityProvider, extract_access_token

USER_PAYLOAD = {
    "id": "u-1",
    "email": "grace@example.com",
    "user_metadata": {"full_name": "Grace Hopper", "is_admin": True},
}


def _response(status_code, payload=None, method="GET", path="/auth/v1/user"):
    request = httpx.Request(method, f"https://auth.example.com{path}")
    return httpx.Response(status_code, json=payload, request=request)


@pytest.fixture()
def provider():
    return IdentityProvider(base_url="https://auth.example.com/", api_key="anon-key", timeout=2)


def test_identity_from_payload():
    identity = Identity.from_user_payload(USER_PAYLOAD)
    assert identity.is_admin is True
    assert identity.display_name == "Grace Hopper"
    assert identity.handle == "grace"


def test_admin_flag_must_be_literal_true():
    payload = {"id": "u-2", "user_metadata": {"is_admin": "true"}}
    assert Identity.from_user_payload(payload).is_admin is False


def test_extract_access_token_prefers_bearer_header():
    assert extract_access_token("Bearer abc", "cookie") == "abc"
    assert extract_access_token("Basic abc", "cookie") == "cookie"
    assert extract_access_token(None, None) is None


def test_get_user_sends_token_and_api_key(provider):
    with patch("dspforms.core.identity.httpx.request", return_value=_response(200, USER_PAYLOAD)) as req:
        identity = provider.get_user("tok")

    assert identity.id == "u-1"
    args, kwargs = req.call_args
    assert args == ("GET", "https://auth.example.com/auth/v1/user")
    assert kwargs["headers"] == {"apikey": "anon-key", "Authorization": "Bearer tok"}


def test_get_user_treats_rejected_token_as_anonymous(provider):
    with patch("dspforms.core.identity.httpx.request", return_value=_response(401, {"msg": "bad"})):
        assert provider.get_user("expired") is None


def test_unconfigured_provider_is_anonymous():
    assert IdentityProvider(base_url="").get_user("tok") is None


def test_sign_in_returns_access_token(provider):
    response = _response(200, {"access_token": "new-token"}, method="POST", path="/auth/v1/token")
    with patch("dspforms.core.identity.httpx.request", return_value=response) as req:
        assert provider.sign_in("a@x.com", "pw") == "new-token"
    assert req.call_args.kwargs["params"] == {"grant_type": "password"}


def test_sign_in_failure_keeps_status(provider):
    response = _response(400, {"error": "invalid_grant"}, method="POST", path="/auth/v1/token")
    with patch("dspforms.core.identity.httpx.request", return_value=response):
        with pytest.raises(IdentityProviderError) as excinfo:
            provider.sign_in("a@x.com", "wrong")
    assert excinfo.value.status_code == 400


def test_connection_error_becomes_bad_gateway(provider):
    error = httpx.ConnectError("refused")
    with patch("dspforms.core.identity.httpx.request", side_effect=error):
        with pytest.raises(IdentityProviderError) as excinfo:
            provider.sign_up("a@x.com", "pw", "Ada")
    assert excinfo.value.status_code == 502
