"""Form definition and field schema models."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class FieldKind(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    TEL = "tel"
    DATE = "date"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"

    @property
    def is_single_line(self) -> bool:
        return self in SINGLE_LINE_KINDS

    @property
    def has_options(self) -> bool:
        return self in (FieldKind.SELECT, FieldKind.RADIO)


SINGLE_LINE_KINDS = frozenset(
    {FieldKind.TEXT, FieldKind.EMAIL, FieldKind.NUMBER, FieldKind.TEL, FieldKind.DATE}
)

# Labels used by the admin field-type picker, in display order
FIELD_KIND_LABELS: Dict[FieldKind, str] = {
    FieldKind.TEXT: "Text",
    FieldKind.EMAIL: "Email",
    FieldKind.NUMBER: "Number",
    FieldKind.TEL: "Phone",
    FieldKind.DATE: "Date",
    FieldKind.TEXTAREA: "Long Text",
    FieldKind.SELECT: "Dropdown",
    FieldKind.RADIO: "Radio Buttons",
    FieldKind.CHECKBOX: "Checkbox",
}

KNOWN_CATEGORIES: Dict[str, str] = {
    "general": "General",
    "application": "Application",
    "survey": "Survey",
    "registration": "Registration",
    "government": "Government",
}


def category_label(category: str) -> str:
    return KNOWN_CATEGORIES.get(category, category)


class FieldSchema(BaseModel):
    """One typed input slot within a form."""

    id: str
    label: str
    type: FieldKind = FieldKind.TEXT
    required: bool = False
    placeholder: Optional[str] = None
    options: List[str] = PydanticField(default_factory=list)


class FormDefinition(SQLModel, table=True):
    __tablename__ = "forms"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    title: str = Field(max_length=255)
    description: Optional[str] = None
    category: str = Field(default="general", max_length=64, index=True)
    # Ordered list of FieldSchema dicts; order is display and export order
    fields: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    is_public: bool = Field(default=True, index=True)
    requires_auth: bool = Field(default=False)
    created_by: Optional[str] = Field(default=None, max_length=64)
    created_at: datetime = Field(
        default_factory=utcnow, index=True, nullable=False, sa_type=DateTime(timezone=True)
    )

    @property
    def field_schemas(self) -> List[FieldSchema]:
        return [FieldSchema.model_validate(item) for item in self.fields or []]

    @property
    def category_label(self) -> str:
        return category_label(self.category)


__all__ = [
    "FieldKind",
    "FieldSchema",
    "FormDefinition",
    "FIELD_KIND_LABELS",
    "KNOWN_CATEGORIES",
    "SINGLE_LINE_KINDS",
    "category_label",
    "new_id",
    "utcnow",
]
