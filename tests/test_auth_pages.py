"""Tests for sign-in, sign-up and sign-out pages."""

from __future__ import annotations

from dspforms.core.errors import IdentityProviderError


def test_login_sets_session_cookie(anon_client, fake_provider):
    resp = anon_client.post("/auth/login", data={"email": "a@x.com", "password": "pw"})
    assert resp.status_code == 303
    assert resp.headers["location"] == "/"
    assert "dspforms_session=token-123" in resp.headers["set-cookie"]
    assert fake_provider.calls == [("sign_in", "a@x.com")]


def test_bad_credentials_rerender_login(anon_client, fake_provider):
    fake_provider.error = IdentityProviderError("rejected", status_code=400)
    resp = anon_client.post("/auth/login", data={"email": "a@x.com", "password": "bad"})
    assert resp.status_code == 400
    assert "Invalid email or password." in resp.text
    assert 'value="a@x.com"' in resp.text


def test_auth_outage_goes_to_error_page(anon_client, fake_provider):
    fake_provider.error = IdentityProviderError("down")
    resp = anon_client.post("/auth/login", data={"email": "a@x.com", "password": "pw"})
    assert resp.headers["location"] == "/auth/error"


def test_sign_up_redirects_to_success(anon_client, fake_provider):
    resp = anon_client.post(
        "/auth/sign-up", data={"email": "a@x.com", "password": "pw", "full_name": "Ada"}
    )
    assert resp.headers["location"] == "/auth/sign-up-success"
    assert fake_provider.calls == [("sign_up", "a@x.com", "Ada")]
    assert "Check your email" in anon_client.get("/auth/sign-up-success").text


def test_logout_clears_cookie(anon_client, fake_provider):
    anon_client.cookies.set("dspforms_session", "tok")
    resp = anon_client.post("/auth/logout")
    assert resp.headers["location"] == "/?notice=signed_out"
    assert fake_provider.calls == [("sign_out", "tok")]
    assert 'dspforms_session=""' in resp.headers["set-cookie"]


def test_signed_out_notice(anon_client):
    assert "You have been signed out." in anon_client.get("/?notice=signed_out").text
