"""Form authoring: create, look up and delete form definitions."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from dspforms.core.errors import FormValidationError, NotFoundError, StoreWriteError
from dspforms.core.logging_config import log_context
from dspforms.core.metrics import FORMS_CREATED, FORMS_DELETED
from dspforms.models import FieldSchema, FormDefinition

logger = logging.getLogger(__name__)


def parse_options(raw: str | None) -> list[str]:
    """Split a comma-separated option string, dropping blanks."""
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def new_field_id() -> str:
    return f"field_{uuid.uuid4().hex[:12]}"


def _coerce_fields(fields: Iterable[FieldSchema | dict[str, Any]]) -> list[FieldSchema]:
    schemas: list[FieldSchema] = []
    for item in fields:
        if isinstance(item, FieldSchema):
            schemas.append(item)
            continue
        data = dict(item)
        if not data.get("id"):
            data["id"] = new_field_id()
        try:
            schemas.append(FieldSchema.model_validate(data))
        except ValidationError as exc:
            raise FormValidationError(f"Invalid field definition: {exc.errors()[0]['msg']}") from exc
    return schemas


def validate_definition(title: str, fields: Sequence[FieldSchema]) -> None:
    """Reject a form before anything is written."""

    if not title.strip() or not fields:
        raise FormValidationError("Please provide a title and at least one field.")
    for field in fields:
        if not field.label.strip():
            raise FormValidationError("All fields must have a label.")
    seen: set[str] = set()
    for field in fields:
        if field.id in seen:
            raise FormValidationError(f"Duplicate field id: {field.id}")
        seen.add(field.id)
        if field.type.has_options and not field.options:
            raise FormValidationError(f"{field.label} needs at least one option.")


def create_form(
    session: Session,
    *,
    title: str,
    fields: Iterable[FieldSchema | dict[str, Any]],
    description: str | None = None,
    category: str = "general",
    requires_auth: bool = False,
    created_by: str | None = None,
) -> FormDefinition:
    """Create and publish a form in one step."""

    schemas = _coerce_fields(fields)
    validate_definition(title, schemas)

    record = FormDefinition(
        title=title,
        description=description or None,
        category=category or "general",
        fields=[
            schema.model_dump(mode="json", exclude_none=True) for schema in schemas
        ],
        is_public=True,
        requires_auth=requires_auth,
        created_by=created_by,
    )
    try:
        session.add(record)
        session.commit()
        session.refresh(record)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Failed to create form %r", title, exc_info=True)
        raise StoreWriteError("Failed to create form.") from exc

    FORMS_CREATED.inc()
    logger.info(
        "Created form %s (%s) with %d fields",
        record.id,
        record.title,
        len(schemas),
        extra=log_context(form_id=record.id, user_id=created_by),
    )
    return record


def get_form(session: Session, form_id: str) -> FormDefinition:
    record = session.get(FormDefinition, form_id)
    if not record:
        raise NotFoundError("Form not found")
    return record


def get_public_form(session: Session, form_id: str) -> FormDefinition:
    record = session.exec(
        select(FormDefinition)
        .where(FormDefinition.id == form_id)
        .where(FormDefinition.is_public.is_(True))
    ).first()
    if not record:
        raise NotFoundError("Form not found")
    return record


def list_forms(session: Session) -> Sequence[FormDefinition]:
    """Every form, newest first (admin view)."""
    return session.exec(select(FormDefinition).order_by(FormDefinition.created_at.desc())).all()


def delete_form(session: Session, form_id: str) -> None:
    record = get_form(session, form_id)
    try:
        session.delete(record)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(
            "Failed to delete form %s", form_id, exc_info=True, extra=log_context(form_id=form_id)
        )
        raise StoreWriteError("Failed to delete form.") from exc
    FORMS_DELETED.inc()
    logger.info("Deleted form %s", form_id, extra=log_context(form_id=form_id))


__all__ = [
    "create_form",
    "delete_form",
    "get_form",
    "get_public_form",
    "list_forms",
    "new_field_id",
    "parse_options",
    "validate_definition",
]
