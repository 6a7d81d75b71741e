"""Shared fixtures: in-memory database, fixed identities and app clients."""

from __future__ import annotations

import os
from typing import Optional

# Settings and the engine are built at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_URL"] = ""

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from dspforms.api.deps import get_current_user, get_identity_provider
from dspforms.core.identity import Identity
from dspforms.db.session import engine, get_session, init_db
from dspforms.main import app
from dspforms.services import forms as form_service

ADMIN = Identity(id="admin-1", email="admin@example.com", display_name="Ada Admin", is_admin=True)
MEMBER = Identity(id="user-1", email="jane@example.com", display_name="Jane Doe")


@pytest.fixture(autouse=True)
def _database():
    init_db()
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def session():
    with get_session() as db:
        yield db


IDENTITY_HEADER = "X-Test-Identity"
IDENTITIES = {"admin": ADMIN, "member": MEMBER}


def _identity_from_header(request: Request) -> Optional[Identity]:
    """Each test client names its caller in a header, so clients never share one."""
    return IDENTITIES.get(request.headers.get(IDENTITY_HEADER, ""))


@pytest.fixture(autouse=True)
def _identity_override():
    app.dependency_overrides[get_current_user] = _identity_from_header
    yield
    app.dependency_overrides.clear()


def _client_for(role: Optional[str]) -> TestClient:
    headers = {IDENTITY_HEADER: role} if role else {}
    return TestClient(app, headers=headers, follow_redirects=False)


@pytest.fixture()
def anon_client():
    return _client_for(None)


@pytest.fixture()
def member_client():
    return _client_for("member")


@pytest.fixture()
def admin_client():
    return _client_for("admin")


class FakeIdentityProvider:
    """Stands in for the auth server in sign-in and sign-out tests."""

    def __init__(self, token: str = "token-123", error=None) -> None:
        self.token = token
        self.error = error
        self.calls: list[tuple] = []

    def get_user(self, access_token):
        return None

    def sign_in(self, email, password):
        self.calls.append(("sign_in", email))
        if self.error:
            raise self.error
        return self.token

    def sign_up(self, email, password, full_name=None):
        self.calls.append(("sign_up", email, full_name))
        if self.error:
            raise self.error

    def sign_out(self, access_token):
        self.calls.append(("sign_out", access_token))


@pytest.fixture()
def fake_provider():
    provider = FakeIdentityProvider()
    app.dependency_overrides[get_identity_provider] = lambda: provider
    return provider


@pytest.fixture()
def contact_form(session):
    """Anonymous-friendly form with one of every interesting kind."""
    return form_service.create_form(
        session,
        title="Contact Request",
        description="Tell us how to reach you",
        category="general",
        fields=[
            {"id": "name", "label": "Name", "type": "text", "required": True},
            {"id": "topic", "label": "Topic", "type": "select", "options": ["Billing", "Support"]},
            {"id": "urgent", "label": "Urgent", "type": "checkbox"},
            {"id": "details", "label": "Details", "type": "textarea"},
        ],
        created_by=ADMIN.id,
    )


@pytest.fixture()
def gated_form(session):
    return form_service.create_form(
        session,
        title="Member Survey",
        category="survey",
        requires_auth=True,
        fields=[{"id": "rating", "label": "Rating", "type": "radio", "options": ["Good", "Bad"]}],
        created_by=ADMIN.id,
    )
