"""Submission review and export endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel
from sqlmodel import Session

from dspforms.api.deps import get_db, require_admin, require_user
from dspforms.core.identity import Identity
from dspforms.models import FieldSchema, Submission, SubmissionStatus
from dspforms.services.pdf_export import admin_submission_pdf, owner_submission_pdf
from dspforms.services.review import set_status
from dspforms.services.submissions import (
    SubmissionView,
    get_submission_view,
    list_submissions,
    list_user_submissions,
)

router = APIRouter(prefix="/submissions", tags=["submissions"])


class ParentForm(BaseModel):
    title: str
    category: str
    fields: List[FieldSchema]


class SubmissionRead(BaseModel):
    id: str
    form_id: str
    user_id: Optional[str] = None
    submitter_name: Optional[str] = None
    submitter_email: Optional[str] = None
    data: dict[str, Any]
    status: str
    submitted_at: datetime
    forms: Optional[ParentForm] = None

    @classmethod
    def from_view(cls, view: SubmissionView) -> "SubmissionRead":
        sub = view.submission
        parent = None
        if view.form_title is not None:
            parent = ParentForm(
                title=view.form_title,
                category=view.form_category or "general",
                fields=view.form_fields,
            )
        return cls(
            id=sub.id,
            form_id=sub.form_id,
            user_id=sub.user_id,
            submitter_name=sub.submitter_name,
            submitter_email=sub.submitter_email,
            data=sub.data or {},
            status=sub.status,
            submitted_at=sub.submitted_at,
            forms=parent,
        )


class StatusPayload(BaseModel):
    status: SubmissionStatus


def _visible_to(view: SubmissionView, user: Identity) -> bool:
    return user.is_admin or view.submission.user_id == user.id


@router.get("", response_model=List[SubmissionRead])
def list_all(
    session: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> Any:
    return [SubmissionRead.from_view(view) for view in list_submissions(session)]


@router.get("/mine", response_model=List[SubmissionRead])
def list_mine(
    session: Session = Depends(get_db),
    user: Identity = Depends(require_user),
) -> Any:
    return [SubmissionRead.from_view(view) for view in list_user_submissions(session, user.id)]


@router.get("/{submission_id}", response_model=SubmissionRead)
def get_one(
    submission_id: str,
    session: Session = Depends(get_db),
    user: Identity = Depends(require_user),
) -> Any:
    view = get_submission_view(session, submission_id)
    if not _visible_to(view, user):
        raise HTTPException(status_code=404, detail="Submission not found")
    return SubmissionRead.from_view(view)


@router.patch("/{submission_id}/status", response_model=Submission)
def update_status(
    submission_id: str,
    payload: StatusPayload,
    session: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> Any:
    return set_status(session, submission_id, payload.status)


@router.get("/{submission_id}/pdf")
def download_pdf(
    submission_id: str,
    session: Session = Depends(get_db),
    user: Identity = Depends(require_user),
) -> Response:
    """Reviewer layout for administrators, list-item layout for the submitter."""
    view = get_submission_view(session, submission_id)
    if not _visible_to(view, user):
        raise HTTPException(status_code=404, detail="Submission not found")
    document = admin_submission_pdf(view) if user.is_admin else owner_submission_pdf(view)
    return Response(
        content=document.render(),
        media_type="application/pdf",
        headers={"Content-Disposition": document.content_disposition},
    )


__all__ = ["router", "SubmissionRead"]
