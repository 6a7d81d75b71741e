"""Tests for submission intake and lookups."""

from __future__ import annotations

import pytest

from dspforms.core.errors import AccessDeniedError, FormValidationError, NotFoundError
from dspforms.services import forms as form_service
from dspforms.services.submissions import (
    get_submission_view,
    list_submissions,
    list_user_submissions,
    submit,
)

from .conftest import MEMBER


def test_anonymous_submission_records_inline_identity(session):
    form = form_service.create_form(
        session, title="Sign-in Sheet", fields=[{"id": "name", "label": "Name", "required": True}]
    )
    record = submit(session, form, {"name": "Ada", "_name": "Ada", "_email": "ada@x.com"})

    assert record.status == "pending"
    assert record.submitter_name == "Ada"
    assert record.submitter_email == "ada@x.com"
    assert record.user_id is None
    assert record.data == {"name": "Ada", "_name": "Ada", "_email": "ada@x.com"}
    assert len(list_submissions(session)) == 1


def test_anonymous_submission_needs_name_and_email(session, contact_form):
    with pytest.raises(FormValidationError, match="Please provide your name and email."):
        submit(session, contact_form, {"name": "Ada", "_name": "Ada"})
    assert list_submissions(session) == []


def test_gated_form_refuses_anonymous(session, gated_form):
    with pytest.raises(AccessDeniedError):
        submit(session, gated_form, {"rating": "Good", "_name": "A", "_email": "a@x.com"})
    assert list_submissions(session) == []


def test_signed_in_submission_uses_identity(session, gated_form):
    record = submit(session, gated_form, {"rating": "Good"}, identity=MEMBER)
    assert record.user_id == MEMBER.id
    assert record.submitter_name == "Jane Doe"
    assert record.submitter_email == "jane@example.com"


def test_user_submissions_carry_parent_form(session, gated_form, contact_form):
    submit(session, gated_form, {"rating": "Bad"}, identity=MEMBER)
    submit(session, contact_form, {"name": "Anon", "_name": "A", "_email": "a@x.com"})

    views = list_user_submissions(session, MEMBER.id)
    assert len(views) == 1
    assert views[0].form_title == "Member Survey"
    assert views[0].form_category == "survey"
    assert [f.id for f in views[0].form_fields] == ["rating"]


def test_get_submission_view_missing(session):
    with pytest.raises(NotFoundError):
        get_submission_view(session, "nope")

