"""Submission intake and submission lookups."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from dspforms.core.errors import (
    AccessDeniedError,
    FormValidationError,
    NotFoundError,
    StoreWriteError,
)
from dspforms.core.identity import Identity
from dspforms.core.logging_config import log_context
from dspforms.core.metrics import SUBMISSIONS_RECEIVED
from dspforms.models import FieldSchema, FormDefinition, Submission, SubmissionStatus
from dspforms.services.values import validate_answers

logger = logging.getLogger(__name__)

# Inline identity inputs shown to anonymous submitters
ANON_NAME_KEY = "_name"
ANON_EMAIL_KEY = "_email"


@dataclass
class SubmissionView:
    """A submission joined with the parent form's title, category and fields."""

    submission: Submission
    form_title: Optional[str] = None
    form_category: Optional[str] = None
    form_fields: list[FieldSchema] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.submission.id

    @property
    def status(self) -> str:
        return self.submission.status

    @property
    def data(self) -> dict[str, Any]:
        return self.submission.data or {}

    @classmethod
    def from_row(cls, submission: Submission, form: FormDefinition | None) -> "SubmissionView":
        if form is None:
            return cls(submission=submission)
        return cls(
            submission=submission,
            form_title=form.title,
            form_category=form.category,
            form_fields=form.field_schemas,
        )


def can_open(form: FormDefinition, identity: Identity | None) -> bool:
    return not (form.requires_auth and identity is None)


def _text(raw: Any) -> str | None:
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None


def submit(
    session: Session,
    form: FormDefinition,
    raw_data: Mapping[str, Any],
    identity: Identity | None = None,
) -> Submission:
    """Validate answers and insert one pending submission."""

    if not can_open(form, identity):
        SUBMISSIONS_RECEIVED.labels(outcome="denied").inc()
        raise AccessDeniedError()

    try:
        answers = validate_answers(form.field_schemas, raw_data)
    except FormValidationError:
        SUBMISSIONS_RECEIVED.labels(outcome="invalid").inc()
        raise

    if identity is not None:
        submitter_name = identity.display_name or _text(answers.get(ANON_NAME_KEY))
        submitter_email = identity.email or _text(answers.get(ANON_EMAIL_KEY))
    else:
        submitter_name = _text(answers.get(ANON_NAME_KEY))
        submitter_email = _text(answers.get(ANON_EMAIL_KEY))
        if not submitter_name or not submitter_email:
            SUBMISSIONS_RECEIVED.labels(outcome="invalid").inc()
            raise FormValidationError("Please provide your name and email.")

    record = Submission(
        form_id=form.id,
        user_id=identity.id if identity else None,
        submitter_name=submitter_name,
        submitter_email=submitter_email,
        # The inline _name/_email answers stay in data alongside field answers
        data=answers,
        status=SubmissionStatus.PENDING.value,
    )
    try:
        session.add(record)
        session.commit()
        session.refresh(record)
    except SQLAlchemyError as exc:
        session.rollback()
        SUBMISSIONS_RECEIVED.labels(outcome="failed").inc()
        logger.error(
            "Failed to insert submission for form %s",
            form.id,
            exc_info=True,
            extra=log_context(form_id=form.id),
        )
        raise StoreWriteError("Failed to submit form. Please try again.") from exc

    SUBMISSIONS_RECEIVED.labels(outcome="accepted").inc()
    logger.info(
        "Recorded submission %s for form %s (user=%s)",
        record.id,
        form.id,
        record.user_id,
        extra=log_context(
            form_id=form.id,
            submission_id=record.id,
            status=record.status,
            user_id=record.user_id,
        ),
    )
    return record


def _joined():
    return select(Submission, FormDefinition).join(
        FormDefinition, FormDefinition.id == Submission.form_id, isouter=True
    )


def list_submissions(session: Session) -> list[SubmissionView]:
    """Every submission with its form, newest first (admin view)."""
    rows = session.exec(_joined().order_by(Submission.submitted_at.desc())).all()
    return [SubmissionView.from_row(sub, form) for sub, form in rows]


def list_user_submissions(session: Session, user_id: str) -> list[SubmissionView]:
    rows = session.exec(
        _joined().where(Submission.user_id == user_id).order_by(Submission.submitted_at.desc())
    ).all()
    return [SubmissionView.from_row(sub, form) for sub, form in rows]


def get_submission_view(session: Session, submission_id: str) -> SubmissionView:
    row = session.exec(_joined().where(Submission.id == submission_id)).first()
    if not row:
        raise NotFoundError("Submission not found")
    submission, form = row
    return SubmissionView.from_row(submission, form)


__all__ = [
    "ANON_EMAIL_KEY",
    "ANON_NAME_KEY",
    "SubmissionView",
    "can_open",
    "get_submission_view",
    "list_submissions",
    "list_user_submissions",
    "submit",
]
