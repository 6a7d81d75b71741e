"""Turns a form definition into the widgets of its input page."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from dspforms.core.errors import AccessDeniedError
from dspforms.core.identity import Identity
from dspforms.models import FieldKind, FieldSchema, FormDefinition
from dspforms.services.submissions import ANON_EMAIL_KEY, ANON_NAME_KEY, can_open


@dataclass
class Choice:
    value: str
    element_id: str
    selected: bool = False


@dataclass
class Widget:
    """One rendered input. ``control`` picks the template macro."""

    name: str
    label: str
    control: str
    required: bool = False
    input_type: Optional[str] = None
    placeholder: Optional[str] = None
    value: Any = None
    choices: list[Choice] = field(default_factory=list)
    rows: Optional[int] = None


@dataclass
class FormSurface:
    form: FormDefinition
    widgets: list[Widget]
    identity_inputs: list[Widget] = field(default_factory=list)


def _choices(schema: FieldSchema, value: Any) -> list[Choice]:
    # Option text may hold spaces, so ids use the option position
    return [
        Choice(value=opt, element_id=f"{schema.id}-{index}", selected=opt == value)
        for index, opt in enumerate(schema.options)
    ]


def widget_for(schema: FieldSchema, value: Any = None) -> Widget:
    kind = schema.type
    base = dict(name=schema.id, label=schema.label, required=schema.required)
    if kind.is_single_line:
        return Widget(
            control="input",
            input_type=kind.value,
            placeholder=schema.placeholder,
            value=value if isinstance(value, str) else "",
            **base,
        )
    if kind is FieldKind.TEXTAREA:
        return Widget(
            control="textarea",
            placeholder=schema.placeholder,
            value=value if isinstance(value, str) else "",
            rows=4,
            **base,
        )
    if kind is FieldKind.SELECT:
        return Widget(
            control="select",
            placeholder=schema.placeholder or "Select an option",
            value=value,
            choices=_choices(schema, value),
            **base,
        )
    if kind is FieldKind.RADIO:
        return Widget(
            control="radio",
            value=value,
            choices=_choices(schema, value),
            **base,
        )
    if kind is FieldKind.CHECKBOX:
        # The browser never enforces required on a lone checkbox
        base["required"] = False
        return Widget(
            control="checkbox",
            placeholder=schema.placeholder or "Yes",
            value=value is True,
            **base,
        )
    raise ValueError(f"Unhandled field kind: {kind}")  # pragma: no cover


def identity_widgets(values: Mapping[str, Any]) -> list[Widget]:
    return [
        Widget(
            name=ANON_NAME_KEY,
            label="Full Name",
            control="input",
            input_type="text",
            placeholder="Your name",
            required=True,
            value=values.get(ANON_NAME_KEY) or "",
        ),
        Widget(
            name=ANON_EMAIL_KEY,
            label="Email",
            control="input",
            input_type="email",
            placeholder="your@email.com",
            required=True,
            value=values.get(ANON_EMAIL_KEY) or "",
        ),
    ]


def build_surface(
    form: FormDefinition,
    identity: Identity | None,
    values: Mapping[str, Any] | None = None,
) -> FormSurface:
    """Widgets for every field, plus name/email inputs for anonymous visitors.

    Raises AccessDeniedError instead of building anything when the form
    needs a signed-in user and there is none.
    """

    if not can_open(form, identity):
        raise AccessDeniedError()
    values = values or {}
    widgets = [widget_for(schema, values.get(schema.id)) for schema in form.field_schemas]
    extra = identity_widgets(values) if identity is None else []
    return FormSurface(form=form, widgets=widgets, identity_inputs=extra)


def collect_values(
    form: FormDefinition, posted: Mapping[str, Any], identity: Identity | None
) -> dict[str, Any]:
    """Read an HTML form post into a field-id -> value mapping.

    An unchecked checkbox is absent from the post and stays unanswered.
    """

    values: dict[str, Any] = {}
    for schema in form.field_schemas:
        if schema.id not in posted:
            continue
        if schema.type is FieldKind.CHECKBOX:
            values[schema.id] = True
        else:
            values[schema.id] = posted[schema.id]
    if identity is None:
        for key in (ANON_NAME_KEY, ANON_EMAIL_KEY):
            if key in posted:
                values[key] = posted[key]
    return values


__all__ = [
    "Choice",
    "FormSurface",
    "Widget",
    "build_surface",
    "collect_values",
    "identity_widgets",
    "widget_for",
]
