"""Sign-in, sign-up and sign-out pages backed by the identity provider."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from dspforms.api.deps import get_access_token, get_current_user, get_identity_provider
from dspforms.core.config import settings
from dspforms.core.errors import IdentityProviderError
from dspforms.core.identity import Identity, IdentityProvider
from dspforms.pages import render

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, user: Optional[Identity] = Depends(get_current_user)) -> Any:
    return render(request, "auth/login.html", user, {"email": ""})


@router.post("/login")
def login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Any:
    try:
        token = provider.sign_in(email, password)
    except IdentityProviderError as exc:
        if exc.status_code in (400, 401, 422):
            return render(
                request,
                "auth/login.html",
                None,
                {"email": email, "form_error": "Invalid email or password."},
                status_code=400,
            )
        return RedirectResponse(url="/auth/error", status_code=303)

    response = RedirectResponse(url="/", status_code=303)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_cookie_max_age,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    logger.info("User signed in: %s", email)
    return response


@router.get("/sign-up", response_class=HTMLResponse)
def sign_up_page(request: Request, user: Optional[Identity] = Depends(get_current_user)) -> Any:
    return render(request, "auth/sign_up.html", user, {"email": "", "full_name": ""})


@router.post("/sign-up")
def sign_up(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    full_name: str = Form(""),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Any:
    try:
        provider.sign_up(email, password, full_name or None)
    except IdentityProviderError as exc:
        if exc.status_code in (400, 422):
            return render(
                request,
                "auth/sign_up.html",
                None,
                {
                    "email": email,
                    "full_name": full_name,
                    "form_error": "Could not create the account. Check your details and try again.",
                },
                status_code=400,
            )
        return RedirectResponse(url="/auth/error", status_code=303)
    return RedirectResponse(url="/auth/sign-up-success", status_code=303)


@router.get("/sign-up-success", response_class=HTMLResponse)
def sign_up_success(request: Request) -> Any:
    return render(request, "auth/sign_up_success.html", None)


@router.get("/error", response_class=HTMLResponse)
def auth_error(request: Request) -> Any:
    return render(request, "auth/error.html", None)


@router.post("/logout")
def logout(
    token: Optional[str] = Depends(get_access_token),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Any:
    if token:
        try:
            provider.sign_out(token)
        except IdentityProviderError:
            # The cookie is dropped either way
            logger.warning("Auth server sign-out failed", exc_info=True)
    response = RedirectResponse(url="/?notice=signed_out", status_code=303)
    response.delete_cookie(settings.session_cookie_name)
    return response


__all__ = ["router"]
