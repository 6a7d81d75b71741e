"""Tests for the server-rendered pages."""

from __future__ import annotations

import io

from pypdf import PdfReader
from sqlmodel import select

from dspforms.models import Submission
from dspforms.pages import parse_field_rows
from dspforms.services import forms as form_service
from dspforms.services.submissions import submit

from .conftest import ADMIN, MEMBER


# ── Listing ───────────────────────────────────────────────────────────────


def test_listing_filters_by_search_and_category(anon_client, contact_form, gated_form):
    resp = anon_client.get("/")
    assert resp.status_code == 200
    assert "Contact Request" in resp.text
    assert "Member Survey" in resp.text
    assert "Login required" in resp.text

    resp = anon_client.get("/", params={"category": "survey"})
    assert "Member Survey" in resp.text
    assert "Contact Request" not in resp.text

    resp = anon_client.get("/", params={"q": "nothing matches"})
    assert "No forms found" in resp.text


def test_listing_empty_state(anon_client):
    assert "No forms have been published yet" in anon_client.get("/").text


# ── Fill in and submit ────────────────────────────────────────────────────


def test_anonymous_sees_identity_inputs(anon_client, contact_form):
    resp = anon_client.get(f"/forms/{contact_form.id}")
    assert resp.status_code == 200
    assert 'name="_name"' in resp.text
    assert 'name="_email"' in resp.text
    assert "Select an option" in resp.text


def test_radio_ids_use_option_position(member_client, session):
    form = form_service.create_form(
        session,
        title="Plan Choice",
        fields=[
            {"id": "plan", "label": "Plan", "type": "radio", "options": ["Option A", "Option B"]}
        ],
        created_by=ADMIN.id,
    )
    resp = member_client.get(f"/forms/{form.id}")
    assert resp.status_code == 200
    assert 'id="plan-0"' in resp.text
    assert 'for="plan-1"' in resp.text
    assert 'value="Option A"' in resp.text
    assert 'id="plan-Option' not in resp.text


def test_gated_form_denies_anonymous(anon_client, session, gated_form):
    resp = anon_client.get(f"/forms/{gated_form.id}")
    assert "Login Required" in resp.text
    assert "<form method=\"post\" action=\"/forms/" not in resp.text

    resp = anon_client.post(
        f"/forms/{gated_form.id}", data={"rating": "Good", "_name": "A", "_email": "a@x.com"}
    )
    assert resp.status_code == 403
    assert session.exec(select(Submission)).all() == []


def test_anonymous_submit_then_download_filled_pdf(anon_client, session, contact_form):
    """An untouched checkbox prints as not provided, not as No."""
    resp = anon_client.post(
        f"/forms/{contact_form.id}",
        data={
            "name": "Ada",
            "topic": "Support",
            "details": "Call after five",
            "_name": "Ada",
            "_email": "ada@x.com",
        },
    )
    assert resp.status_code == 200
    assert "Form Submitted" in resp.text

    record = session.exec(select(Submission)).one()
    assert "urgent" not in record.data
    assert record.submitter_email == "ada@x.com"

    pdf = anon_client.get(f"/forms/{contact_form.id}/submissions/{record.id}/pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert "Contact_Request_filled.pdf" in pdf.headers["content-disposition"]
    text = PdfReader(io.BytesIO(pdf.content)).pages[0].extract_text()
    assert "Call after five" in text
    assert "(not provided)" in text


def test_missing_required_answer_rerenders_with_error(anon_client, session, contact_form):
    resp = anon_client.post(
        f"/forms/{contact_form.id}", data={"_name": "Ada", "_email": "ada@x.com"}
    )
    assert resp.status_code == 422
    assert "Name is required." in resp.text
    assert 'value="Ada"' in resp.text
    assert session.exec(select(Submission)).all() == []


def test_unknown_form_is_not_found(anon_client):
    resp = anon_client.get("/forms/does-not-exist")
    assert resp.status_code == 404
    assert "Form not found" in resp.text


def test_blank_pdf_download(anon_client, contact_form):
    resp = anon_client.get(f"/forms/{contact_form.id}/pdf/blank")
    assert resp.status_code == 200
    assert resp.content.startswith(b"%PDF")


# ── My submissions ────────────────────────────────────────────────────────


def test_my_submissions_requires_sign_in(anon_client):
    resp = anon_client.get("/my-submissions")
    assert resp.status_code == 303
    assert resp.headers["location"] == "/auth/login"


def test_my_submissions_lists_own_rows(member_client, session, gated_form, contact_form):
    submit(session, gated_form, {"rating": "Good"}, identity=MEMBER)
    submit(session, contact_form, {"name": "Other", "_name": "O", "_email": "o@x.com"})

    resp = member_client.get("/my-submissions")
    assert resp.status_code == 200
    assert "Member Survey" in resp.text
    assert "Contact Request" not in resp.text
    assert "pending" in resp.text


def test_my_submission_pdf_only_for_owner(member_client, session, contact_form):
    foreign = submit(session, contact_form, {"name": "X", "_name": "X", "_email": "x@x.com"})
    assert member_client.get(f"/my-submissions/{foreign.id}/pdf").status_code == 404


# ── Admin ─────────────────────────────────────────────────────────────────


def test_admin_gate(anon_client, member_client):
    assert anon_client.get("/admin").headers["location"] == "/auth/login"
    assert member_client.get("/admin").headers["location"] == "/"


def test_admin_dashboard_shows_counts(admin_client, session, contact_form):
    submit(session, contact_form, {"name": "Ada", "_name": "Ada", "_email": "ada@x.com"})
    resp = admin_client.get("/admin")
    assert resp.status_code == 200
    assert 'data-stat="forms">1<' in resp.text
    assert 'data-stat="pending">1<' in resp.text
    assert "Contact Request" in resp.text


def test_admin_creates_form_from_field_rows(admin_client, session):
    resp = admin_client.post(
        "/admin/forms",
        data={
            "title": "Volunteer Signup",
            "category": "registration",
            "requires_auth": "on",
            "fields-0-label": "Shift",
            "fields-0-type": "radio",
            "fields-0-options": "Morning, Evening",
            "fields-0-required": "on",
            "fields-1-label": "Notes",
            "fields-1-type": "textarea",
        },
    )
    assert resp.status_code == 303
    assert resp.headers["location"] == "/admin?notice=form_created"

    (form,) = form_service.list_forms(session)
    assert form.requires_auth is True
    assert form.created_by == ADMIN.id
    assert [f.label for f in form.field_schemas] == ["Shift", "Notes"]
    assert form.field_schemas[0].options == ["Morning", "Evening"]


def test_admin_create_form_keeps_draft_on_error(admin_client, session):
    resp = admin_client.post("/admin/forms", data={"title": "Draft Title"})
    assert resp.status_code == 422
    assert "Please provide a title and at least one field." in resp.text
    assert 'value="Draft Title"' in resp.text
    assert form_service.list_forms(session) == []


def test_admin_deletes_form(admin_client, session, contact_form):
    resp = admin_client.post(f"/admin/forms/{contact_form.id}/delete")
    assert resp.headers["location"] == "/admin?notice=form_deleted"
    assert form_service.list_forms(session) == []


def test_admin_status_update_via_htmx(admin_client, session, contact_form):
    record = submit(session, contact_form, {"name": "Ada", "_name": "Ada", "_email": "ada@x.com"})
    resp = admin_client.post(
        f"/admin/submissions/{record.id}/status",
        data={"status": "approved"},
        headers={"HX-Request": "true"},
    )
    assert resp.status_code == 200
    assert "Status updated." in resp.text
    session.expire_all()
    assert session.get(Submission, record.id).status == "approved"


def test_admin_submission_detail_and_pdf(admin_client, session, contact_form):
    record = submit(session, contact_form, {"name": "Ada", "_name": "Ada", "_email": "ada@x.com"})
    detail = admin_client.get(f"/admin/submissions/{record.id}")
    assert "ada@x.com" in detail.text
    pdf = admin_client.get(f"/admin/submissions/{record.id}/pdf")
    assert f"submission_{record.id[:8]}.pdf" in pdf.headers["content-disposition"]


def test_field_row_partial(admin_client):
    resp = admin_client.get("/admin/partials/field-row", params={"index": 3})
    assert 'name="fields-3-label"' in resp.text


def test_parse_field_rows_orders_by_index():
    posted = {
        "fields-10-label": "Later",
        "fields-2-label": "Earlier",
        "fields-2-type": "select",
        "fields-2-options": "A,B",
        "fields-2-id": "keep_me",
    }
    rows = parse_field_rows(posted)
    assert [r["label"] for r in rows] == ["Earlier", "Later"]
    assert rows[0]["id"] == "keep_me"
    assert rows[0]["options"] == ["A", "B"]
    assert rows[1]["type"] == "text"
    assert rows[1]["required"] is False
