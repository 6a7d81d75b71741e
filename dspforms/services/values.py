"""Typed answer values keyed by field id.

A stored answer is either free text or a checkbox flag. The field's kind
decides which one is expected; anything else is rejected before it reaches
the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from dspforms.core.errors import FormValidationError
from dspforms.models import FieldKind, FieldSchema

NOT_PROVIDED = "(not provided)"

_TRUE_STRINGS = {"true", "on", "yes", "1"}
_FALSE_STRINGS = {"false", "off", "no", "0", ""}


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Flag:
    value: bool


FieldValue = Union[Text, Flag]


def coerce_value(field: FieldSchema, raw: Any) -> FieldValue:
    """Turn a raw submitted value into the variant the field kind expects."""

    if field.type is FieldKind.CHECKBOX:
        if isinstance(raw, bool):
            return Flag(raw)
        if isinstance(raw, str) and raw.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
            return Flag(raw.strip().lower() in _TRUE_STRINGS)
        raise FormValidationError(f"{field.label} must be checked or unchecked.")

    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise FormValidationError(f"{field.label} must be a text value.")
    text = raw if isinstance(raw, str) else str(raw)
    if field.type.has_options and text and text not in field.options:
        raise FormValidationError(f"{field.label} must be one of: {', '.join(field.options)}.")
    return Text(text)


def is_blank(value: FieldValue | None) -> bool:
    return value is None or (isinstance(value, Text) and not value.value.strip())


def unwrap(value: FieldValue) -> str | bool:
    return value.value


def validate_answers(
    fields: Iterable[FieldSchema], raw_data: Mapping[str, Any]
) -> dict[str, str | bool]:
    """Validate a submitted mapping against the form's fields.

    Keys that are not field ids (the inline ``_name``/``_email`` pair, for
    one) are kept as submitted text. Required checkboxes are not enforced,
    matching the browser, which never marks a checkbox required.
    """

    answers: dict[str, str | bool] = {}
    known: set[str] = set()
    for field in fields:
        known.add(field.id)
        raw = raw_data.get(field.id)
        value = coerce_value(field, raw) if raw is not None else None
        if field.required and field.type is not FieldKind.CHECKBOX and is_blank(value):
            raise FormValidationError(f"{field.label} is required.")
        if value is not None:
            answers[field.id] = unwrap(value)

    for key, raw in raw_data.items():
        if key in known or raw is None:
            continue
        if isinstance(raw, bool):
            answers[key] = raw
        elif isinstance(raw, (str, int, float)):
            answers[key] = raw if isinstance(raw, str) else str(raw)
        else:
            raise FormValidationError(f"Unsupported value for {key}.")
    return answers


def display_value(raw: Any, empty: str = NOT_PROVIDED) -> str:
    """Render a stored answer as text: Yes/No for flags, ``empty`` when missing."""

    if raw is None or raw == "":
        return empty
    if isinstance(raw, bool):
        return "Yes" if raw else "No"
    return str(raw)


__all__ = [
    "NOT_PROVIDED",
    "Text",
    "Flag",
    "FieldValue",
    "coerce_value",
    "display_value",
    "is_blank",
    "validate_answers",
]
