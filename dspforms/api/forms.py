"""Form definition endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Union

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field
from sqlmodel import Session

from dspforms.api.deps import get_current_user, get_db, require_admin
from dspforms.core.errors import AccessDeniedError
from dspforms.core.identity import Identity
from dspforms.models import FieldSchema, FormDefinition, Submission
from dspforms.services import forms as form_service
from dspforms.services.listing import ALL_CATEGORIES, category_chips, filter_forms, list_public_forms
from dspforms.services.pdf_export import blank_form_pdf
from dspforms.services.submissions import can_open, submit

router = APIRouter(prefix="/forms", tags=["forms"])


class FormSummary(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    category: str
    requires_auth: bool
    created_at: datetime


class FormListing(BaseModel):
    forms: List[FormSummary]
    categories: List[str]


class FormCreatePayload(BaseModel):
    title: str
    description: Optional[str] = None
    category: str = Field(default="general", max_length=64)
    requires_auth: bool = False
    fields: List[dict[str, Any]] = Field(default_factory=list)


class SubmissionPayload(BaseModel):
    data: dict[str, Union[bool, str, int, float]] = Field(default_factory=dict)


@router.get("", response_model=FormListing)
def list_forms(
    q: str = Query("", description="Case-insensitive title/description search"),
    category: str = Query(ALL_CATEGORIES),
    session: Session = Depends(get_db),
) -> Any:
    forms = list_public_forms(session)
    return {
        "forms": filter_forms(forms, q, category),
        "categories": category_chips(forms),
    }


@router.post("", response_model=FormDefinition, status_code=201)
def create_form(
    payload: FormCreatePayload,
    session: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
) -> Any:
    return form_service.create_form(
        session,
        title=payload.title,
        description=payload.description,
        category=payload.category,
        requires_auth=payload.requires_auth,
        fields=payload.fields,
        created_by=admin.id,
    )


@router.get("/{form_id}", response_model=FormDefinition)
def get_form(
    form_id: str,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    form = form_service.get_public_form(session, form_id)
    if not can_open(form, user):
        raise AccessDeniedError()
    return form


@router.get("/{form_id}/fields", response_model=List[FieldSchema])
def get_form_fields(
    form_id: str,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    form = get_form(form_id, session=session, user=user)
    return form.field_schemas


@router.delete("/{form_id}")
def delete_form(
    form_id: str,
    session: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> Any:
    form_service.delete_form(session, form_id)
    return {"deleted": form_id}


@router.post("/{form_id}/submissions", response_model=Submission, status_code=201)
def create_submission(
    form_id: str,
    payload: SubmissionPayload,
    session: Session = Depends(get_db),
    user: Optional[Identity] = Depends(get_current_user),
) -> Any:
    form = form_service.get_public_form(session, form_id)
    return submit(session, form, payload.data, identity=user)


@router.get("/{form_id}/pdf/blank")
def download_blank_pdf(form_id: str, session: Session = Depends(get_db)) -> Response:
    document = blank_form_pdf(form_service.get_public_form(session, form_id))
    return Response(
        content=document.render(),
        media_type="application/pdf",
        headers={"Content-Disposition": document.content_disposition},
    )


__all__ = ["router"]
