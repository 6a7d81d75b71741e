"""Review workflow for submissions.

Status is a free label: ``pending`` is where every submission starts, and
any status may move to any other. Callers are expected to have checked
that the actor is an administrator before calling in here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import func
from sqlmodel import Session, select

from dspforms.core.errors import FormValidationError, NotFoundError, StoreWriteError
from dspforms.core.logging_config import log_context
from dspforms.core.metrics import STATUS_CHANGES
from dspforms.models import FormDefinition, Submission, SubmissionStatus

logger = logging.getLogger(__name__)


def parse_status(value: str | SubmissionStatus) -> SubmissionStatus:
    if isinstance(value, SubmissionStatus):
        return value
    try:
        return SubmissionStatus(value)
    except ValueError as exc:
        allowed = ", ".join(s.value for s in SubmissionStatus)
        raise FormValidationError(f"Unknown status {value!r}; expected one of {allowed}.") from exc


def set_status(session: Session, submission_id: str, status: str | SubmissionStatus) -> Submission:
    """Set a submission's status; setting the current status again is a no-op."""

    target = parse_status(status)
    record = session.get(Submission, submission_id)
    if not record:
        raise NotFoundError("Submission not found")

    previous = record.status
    form_id = record.form_id
    record.status = target.value
    try:
        session.add(record)
        session.commit()
        session.refresh(record)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(
            "Failed to update status of submission %s",
            submission_id,
            exc_info=True,
            extra=log_context(form_id=form_id, submission_id=submission_id),
        )
        raise StoreWriteError("Failed to update status.") from exc

    STATUS_CHANGES.labels(status=target.value).inc()
    logger.info(
        "Submission %s status %s -> %s",
        submission_id,
        previous,
        target.value,
        extra=log_context(
            form_id=form_id, submission_id=submission_id, status=target.value
        ),
    )
    return record


@dataclass
class DashboardStats:
    total_forms: int
    total_submissions: int
    pending: int


def dashboard_stats(session: Session) -> DashboardStats:
    total_forms = session.exec(select(func.count()).select_from(FormDefinition)).one()
    total_submissions = session.exec(select(func.count()).select_from(Submission)).one()
    pending = session.exec(
        select(func.count())
        .select_from(Submission)
        .where(Submission.status == SubmissionStatus.PENDING.value)
    ).one()
    return DashboardStats(
        total_forms=total_forms, total_submissions=total_submissions, pending=pending
    )


__all__ = ["DashboardStats", "dashboard_stats", "parse_status", "set_status"]
