"""Database models."""

from .form import (
    FIELD_KIND_LABELS,
    KNOWN_CATEGORIES,
    FieldKind,
    FieldSchema,
    FormDefinition,
    category_label,
)
from .submission import Submission, SubmissionStatus

__all__ = [
    "FIELD_KIND_LABELS",
    "KNOWN_CATEGORIES",
    "FieldKind",
    "FieldSchema",
    "FormDefinition",
    "Submission",
    "SubmissionStatus",
    "category_label",
]
