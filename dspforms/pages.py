"""Server-rendered pages: listing, form fill-in, my submissions and admin."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from sqlmodel import Session

from dspforms.api.deps import get_current_user, get_db
from dspforms.core.errors import (
    AccessDeniedError,
    FormValidationError,
    NotFoundError,
    StoreWriteError,
)
from dspforms.core.identity import Identity
from dspforms.core.logging_config import log_context
from dspforms.models import (
    FIELD_KIND_LABELS,
    KNOWN_CATEGORIES,
    FieldKind,
    SubmissionStatus,
    category_label,
)
from dspforms.services import forms as form_service
from dspforms.services.listing import ALL_CATEGORIES, category_chips, filter_forms, list_public_forms
from dspforms.services.pdf_export import (
    PdfDocument,
    admin_submission_pdf,
    blank_form_pdf,
    filled_form_pdf,
    format_date,
    owner_submission_pdf,
)
from dspforms.services.rendering import build_surface, collect_values
from dspforms.services.review import dashboard_stats, set_status
from dspforms.services.submissions import (
    get_submission_view,
    list_submissions,
    list_user_submissions,
    submit,
)
from dspforms.services.values import display_value

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))
templates.env.filters["display_value"] = display_value
templates.env.filters["short_date"] = format_date
templates.env.filters["long_date"] = lambda d: f"{d:%B} {d.day}, {d.year}" if d else ""
templates.env.filters["category_label"] = category_label
templates.env.globals["statuses"] = list(SubmissionStatus)

router = APIRouter()
logger = logging.getLogger(__name__)

NOTICES = {
    "form_created": "Form created successfully!",
    "form_deleted": "Form deleted.",
    "status_updated": "Status updated.",
    "signed_out": "You have been signed out.",
}
ERRORS = {
    "delete_failed": "Failed to delete form.",
    "status_failed": "Failed to update status.",
}

_FIELD_KEY = re.compile(r"^fields-(\d+)-label$")


def render(
    request: Request,
    name: str,
    user: Optional[Identity],
    context: dict[str, Any] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    payload = {
        "user": user,
        "notice": NOTICES.get(request.query_params.get("notice", "")),
        "error": ERRORS.get(request.query_params.get("error", "")),
    }
    payload.update(context or {})
    return templates.TemplateResponse(request, name, payload, status_code=status_code)


def pdf_response(document: PdfDocument) -> Response:
    return Response(
        content=document.render(),
        media_type="application/pdf",
        headers={"Content-Disposition": document.content_disposition},
    )


def _login_redirect() -> RedirectResponse:
    return RedirectResponse(url="/auth/login", status_code=303)


def _admin_gate(user: Optional[Identity]) -> Optional[RedirectResponse]:
    """Anonymous visitors go to sign-in, signed-in non-admins go home."""
    if user is None:
        return _login_redirect()
    if not user.is_admin:
        return RedirectResponse(url="/", status_code=303)
    return None


# --- Public listing -------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
def forms_listing(
    request: Request,
    q: str = Query(""),
    category: str = Query(ALL_CATEGORIES),
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    forms = list_public_forms(session)
    return render(
        request,
        "forms/listing.html",
        user,
        {
            "forms": filter_forms(forms, q, category),
            "categories": category_chips(forms),
            "active_category": category,
            "search": q,
        },
    )


# --- Fill in and submit ---------------------------------------------------


def _detail_page(
    request: Request,
    form,
    user: Optional[Identity],
    values: dict[str, Any] | None = None,
    form_error: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    try:
        surface = build_surface(form, user, values)
    except AccessDeniedError:
        return render(request, "forms/denied.html", user, {"form": form}, status_code=status_code)
    return render(
        request,
        "forms/detail.html",
        user,
        {"surface": surface, "form": form, "form_error": form_error},
        status_code=status_code,
    )


@router.get("/forms/{form_id}", response_class=HTMLResponse)
def form_detail(
    request: Request,
    form_id: str,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    form = form_service.get_public_form(session, form_id)
    return _detail_page(request, form, user)


@router.post("/forms/{form_id}", response_class=HTMLResponse)
async def form_submit(
    request: Request,
    form_id: str,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    form = form_service.get_public_form(session, form_id)
    posted = await request.form()
    values = collect_values(form, posted, user)
    try:
        submission = submit(session, form, values, identity=user)
    except AccessDeniedError:
        return render(request, "forms/denied.html", user, {"form": form}, status_code=403)
    except FormValidationError as exc:
        logger.info(
            "Rejected submission for form %s: %s",
            form.id,
            exc.message,
            extra=log_context(form_id=form.id),
        )
        return _detail_page(request, form, user, values, exc.message, exc.status_code)
    except StoreWriteError as exc:
        return _detail_page(request, form, user, values, exc.message, exc.status_code)

    return render(
        request,
        "forms/submitted.html",
        user,
        {"form": form, "submission": submission},
    )


@router.get("/forms/{form_id}/pdf/blank")
def form_blank_pdf(form_id: str, session: Session = Depends(get_db)) -> Response:
    return pdf_response(blank_form_pdf(form_service.get_public_form(session, form_id)))


@router.get("/forms/{form_id}/submissions/{submission_id}/pdf")
def form_filled_pdf(
    form_id: str,
    submission_id: str,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Response:
    """Filled copy offered on the confirmation page right after submitting."""
    form = form_service.get_public_form(session, form_id)
    view = get_submission_view(session, submission_id)
    owner = view.submission.user_id
    if view.submission.form_id != form.id:
        raise NotFoundError("Submission not found")
    if owner is not None and not (user and (user.id == owner or user.is_admin)):
        raise NotFoundError("Submission not found")
    return pdf_response(filled_form_pdf(form, view.data))


# --- My submissions -------------------------------------------------------


@router.get("/my-submissions", response_class=HTMLResponse)
def my_submissions(
    request: Request,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    if user is None:
        return _login_redirect()
    views = list_user_submissions(session, user.id)
    return render(request, "submissions/mine.html", user, {"submissions": views})


@router.get("/my-submissions/{submission_id}/pdf")
def my_submission_pdf(
    submission_id: str,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Response:
    if user is None:
        return _login_redirect()
    view = get_submission_view(session, submission_id)
    if view.submission.user_id != user.id:
        raise NotFoundError("Submission not found")
    return pdf_response(owner_submission_pdf(view))


# --- Admin ----------------------------------------------------------------


def _admin_context(session: Session) -> dict[str, Any]:
    return {
        "stats": dashboard_stats(session),
        "forms": form_service.list_forms(session),
        "submissions": list_submissions(session),
        "field_kinds": FIELD_KIND_LABELS,
        "categories": KNOWN_CATEGORIES,
    }


@router.get("/admin", response_class=HTMLResponse)
def admin_dashboard(
    request: Request,
    tab: str = Query("forms"),
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    redirect = _admin_gate(user)
    if redirect:
        return redirect
    context = _admin_context(session)
    context.update({"tab": tab, "draft": None, "create_error": None})
    return render(request, "admin/dashboard.html", user, context)


@router.get("/admin/partials/field-row", response_class=HTMLResponse)
def admin_field_row(
    request: Request,
    index: int = Query(0, ge=0),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    """HTMX partial appending one more field editor to the create dialog."""
    redirect = _admin_gate(user)
    if redirect:
        return redirect
    return render(
        request,
        "admin/partials/field_row.html",
        user,
        {
            "index": index,
            "field": {"label": "", "type": FieldKind.TEXT.value, "required": False},
            "field_kinds": FIELD_KIND_LABELS,
        },
    )


def parse_field_rows(posted: Any) -> list[dict[str, Any]]:
    """Rebuild the ordered field list from ``fields-<n>-<attr>`` inputs."""
    indexes = sorted(
        int(match.group(1)) for key in posted.keys() if (match := _FIELD_KEY.match(key))
    )
    rows: list[dict[str, Any]] = []
    for idx in indexes:
        prefix = f"fields-{idx}-"
        kind = posted.get(prefix + "type") or FieldKind.TEXT.value
        row: dict[str, Any] = {
            "id": posted.get(prefix + "id") or form_service.new_field_id(),
            "label": posted.get(prefix + "label") or "",
            "type": kind,
            "required": prefix + "required" in posted,
            "placeholder": posted.get(prefix + "placeholder") or None,
            "options": [],
        }
        if kind in (FieldKind.SELECT.value, FieldKind.RADIO.value):
            row["options"] = form_service.parse_options(posted.get(prefix + "options"))
        rows.append(row)
    return rows


@router.post("/admin/forms", response_class=HTMLResponse)
async def admin_create_form(
    request: Request,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    redirect = _admin_gate(user)
    if redirect:
        return redirect
    posted = await request.form()
    draft = {
        "title": posted.get("title") or "",
        "description": posted.get("description") or "",
        "category": posted.get("category") or "general",
        "requires_auth": "requires_auth" in posted,
        "fields": parse_field_rows(posted),
    }
    try:
        form_service.create_form(
            session,
            title=draft["title"],
            description=draft["description"] or None,
            category=draft["category"],
            requires_auth=draft["requires_auth"],
            fields=draft["fields"],
            created_by=user.id,
        )
    except (FormValidationError, StoreWriteError) as exc:
        context = _admin_context(session)
        context.update({"tab": "forms", "draft": draft, "create_error": exc.message})
        return render(request, "admin/dashboard.html", user, context, status_code=exc.status_code)
    return RedirectResponse(url="/admin?notice=form_created", status_code=303)


@router.post("/admin/forms/{form_id}/delete")
def admin_delete_form(
    form_id: str,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    redirect = _admin_gate(user)
    if redirect:
        return redirect
    try:
        form_service.delete_form(session, form_id)
    except StoreWriteError:
        return RedirectResponse(url="/admin?error=delete_failed", status_code=303)
    return RedirectResponse(url="/admin?notice=form_deleted", status_code=303)


@router.get("/admin/submissions/{submission_id}", response_class=HTMLResponse)
def admin_submission_detail(
    request: Request,
    submission_id: str,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    redirect = _admin_gate(user)
    if redirect:
        return redirect
    view = get_submission_view(session, submission_id)
    return render(request, "admin/submission.html", user, {"view": view})


@router.post("/admin/submissions/{submission_id}/status")
async def admin_update_status(
    request: Request,
    submission_id: str,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    redirect = _admin_gate(user)
    if redirect:
        return redirect
    posted = await request.form()
    try:
        set_status(session, submission_id, str(posted.get("status") or ""))
    except StoreWriteError:
        return RedirectResponse(url="/admin?tab=submissions&error=status_failed", status_code=303)
    except FormValidationError as exc:
        return Response(content=exc.message, status_code=exc.status_code, media_type="text/plain")
    if request.headers.get("HX-Request"):
        view = get_submission_view(session, submission_id)
        return render(request, "admin/partials/status_cell.html", user, {"sub": view, "saved": True})
    return RedirectResponse(url="/admin?tab=submissions&notice=status_updated", status_code=303)


@router.get("/admin/submissions/{submission_id}/pdf")
def admin_submission_download(
    submission_id: str,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Response:
    redirect = _admin_gate(user)
    if redirect:
        return redirect
    return pdf_response(admin_submission_pdf(get_submission_view(session, submission_id)))


__all__ = ["router", "templates", "render", "parse_field_rows"]
