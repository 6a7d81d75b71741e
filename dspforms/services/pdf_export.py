"""Fixed-layout PDF exports of forms and submissions.

Layout happens in two steps. The ``*_pdf`` builders walk the form's fields
once, top to bottom, and emit draw operations in millimetres measured from
the top-left corner of an A4 page. ``render_pdf`` then replays those
operations on a reportlab canvas. Text is never measured or wrapped; long
labels and answers simply run off the right edge.
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Sequence, Union
from urllib.parse import quote

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from dspforms.core.metrics import PDF_EXPORTS, PDF_RENDER_SECONDS
from dspforms.models import FieldKind, FieldSchema, FormDefinition
from dspforms.services.submissions import SubmissionView
from dspforms.services.values import display_value

MARGIN_X = 20
OPTION_X = 27
TITLE_Y = 25
PAGE_TOP_Y = 20
PAGE_BREAK_Y = 270
BOX_WIDTH = 170
LINE_BOX_HEIGHT = 8
TEXTAREA_BOX_HEIGHT = 20

TITLE_SIZE = 20
DESCRIPTION_SIZE = 11
META_SIZE = 10
BODY_SIZE = 12

MUTED_GRAY = 100
BOX_GRAY = 180

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class TextOp:
    x: float
    y: float
    text: str
    size: int = BODY_SIZE
    bold: bool = False
    gray: int = 0


@dataclass(frozen=True)
class RectOp:
    x: float
    y: float
    width: float
    height: float
    gray: int = BOX_GRAY


@dataclass(frozen=True)
class CircleOp:
    x: float
    y: float
    radius: float


@dataclass(frozen=True)
class PageBreakOp:
    pass


DrawOp = Union[TextOp, RectOp, CircleOp, PageBreakOp]


@dataclass
class PdfDocument:
    filename: str
    ops: list[DrawOp] = field(default_factory=list)
    variant: str = "form"

    def render(self) -> bytes:
        PDF_EXPORTS.labels(variant=self.variant).inc()
        return render_pdf(self.ops)

    @property
    def page_count(self) -> int:
        return 1 + sum(1 for op in self.ops if isinstance(op, PageBreakOp))

    @property
    def content_disposition(self) -> str:
        ascii_name = self.filename.encode("ascii", "ignore").decode() or "document.pdf"
        ascii_name = ascii_name.replace('"', "")
        return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(self.filename)}"


class _Layout:
    """Single-pass vertical cursor over one or more pages."""

    def __init__(self) -> None:
        self.ops: list[DrawOp] = []
        self.y: float = 0

    def text(self, x: float, y: float, text: str, **style: Any) -> None:
        self.ops.append(TextOp(x=x, y=y, text=text, **style))

    def ensure_room(self) -> None:
        if self.y > PAGE_BREAK_Y:
            self.ops.append(PageBreakOp())
            self.y = PAGE_TOP_Y


def title_filename(title: str, suffix: str) -> str:
    return f"{_WHITESPACE.sub('_', title)}_{suffix}.pdf"


def format_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def _form_header(layout: _Layout, form: FormDefinition) -> None:
    layout.text(MARGIN_X, TITLE_Y, form.title, size=TITLE_SIZE)
    if form.description:
        layout.text(MARGIN_X, 35, form.description, size=DESCRIPTION_SIZE, gray=MUTED_GRAY)
        layout.y = 50
    else:
        layout.y = 40


def _blank_field(layout: _Layout, schema: FieldSchema) -> None:
    label = f"{schema.label} *" if schema.required else schema.label
    layout.text(MARGIN_X, layout.y, label)
    layout.y += 6

    kind = schema.type
    if kind is FieldKind.TEXTAREA:
        layout.ops.append(RectOp(MARGIN_X, layout.y, BOX_WIDTH, TEXTAREA_BOX_HEIGHT))
        layout.y += 28
    elif kind is FieldKind.CHECKBOX:
        layout.ops.append(RectOp(MARGIN_X, layout.y - 3, 4, 4))
        layout.text(OPTION_X, layout.y, "Yes")
        layout.y += 10
    elif kind is FieldKind.RADIO:
        for option in schema.options:
            layout.ops.append(CircleOp(22, layout.y - 1, 2))
            layout.text(OPTION_X, layout.y, option)
            layout.y += 7
        layout.y += 3
    elif kind is FieldKind.SELECT:
        layout.text(MARGIN_X, layout.y, f"Options: {' | '.join(schema.options)}")
        layout.y += 6
        layout.ops.append(RectOp(MARGIN_X, layout.y, BOX_WIDTH, LINE_BOX_HEIGHT))
        layout.y += 15
    elif kind.is_single_line:
        layout.ops.append(RectOp(MARGIN_X, layout.y, BOX_WIDTH, LINE_BOX_HEIGHT))
        layout.y += 15
    else:  # pragma: no cover - every FieldKind is handled above
        raise ValueError(f"Unhandled field kind: {kind}")


def _answer_rows(layout: _Layout, fields: Sequence[FieldSchema], values: Mapping[str, Any]) -> None:
    for schema in fields:
        layout.ensure_room()
        layout.text(MARGIN_X, layout.y, schema.label, bold=True)
        layout.y += 7
        layout.text(MARGIN_X, layout.y, display_value(values.get(schema.id)))
        layout.y += 10


def blank_form_pdf(form: FormDefinition) -> PdfDocument:
    """Empty template: each label followed by an answer box shaped for its kind."""
    layout = _Layout()
    _form_header(layout, form)
    for schema in form.field_schemas:
        layout.ensure_room()
        _blank_field(layout, schema)
    return PdfDocument(
        filename=title_filename(form.title, "blank"), ops=layout.ops, variant="blank"
    )


def filled_form_pdf(form: FormDefinition, values: Mapping[str, Any]) -> PdfDocument:
    """The submitter's copy: each label with the answer given."""
    layout = _Layout()
    _form_header(layout, form)
    _answer_rows(layout, form.field_schemas, values)
    return PdfDocument(
        filename=title_filename(form.title, "filled"), ops=layout.ops, variant="filled"
    )


def admin_submission_pdf(view: SubmissionView) -> PdfDocument:
    """Reviewer export with submitter, date and status under the title."""
    sub = view.submission
    layout = _Layout()
    layout.text(MARGIN_X, TITLE_Y, view.form_title or "Submission", size=TITLE_SIZE)
    submitter = f"{sub.submitter_name or 'Anonymous'} ({sub.submitter_email or 'N/A'})"
    meta = (
        f"Submitted by: {submitter}",
        f"Date: {format_date(sub.submitted_at)}",
        f"Status: {sub.status}",
    )
    for offset, line in zip((35, 41, 47), meta):
        layout.text(MARGIN_X, offset, line, size=META_SIZE, gray=MUTED_GRAY)
    layout.y = 60
    _answer_rows(layout, view.form_fields, view.data)
    return PdfDocument(
        filename=f"submission_{sub.id[:8]}.pdf", ops=layout.ops, variant="admin"
    )


def owner_submission_pdf(view: SubmissionView) -> PdfDocument:
    """Export offered next to each row of the submitter's own list."""
    sub = view.submission
    title = view.form_title or "Form Submission"
    layout = _Layout()
    layout.text(MARGIN_X, TITLE_Y, title, size=TITLE_SIZE)
    meta = (f"Submitted: {format_date(sub.submitted_at)}", f"Status: {sub.status}")
    for offset, line in zip((35, 41), meta):
        layout.text(MARGIN_X, offset, line, size=META_SIZE, gray=MUTED_GRAY)
    layout.y = 55
    _answer_rows(layout, view.form_fields, view.data)
    return PdfDocument(
        filename=title_filename(title, "submission"), ops=layout.ops, variant="owner"
    )


@PDF_RENDER_SECONDS.time()
def render_pdf(ops: Sequence[DrawOp]) -> bytes:
    """Replay draw operations on an A4 reportlab canvas."""

    buffer = io.BytesIO()
    _, page_height = A4
    c = canvas.Canvas(buffer, pagesize=A4)

    def _y(value: float) -> float:
        return page_height - value * mm

    for op in ops:
        if isinstance(op, TextOp):
            c.setFont("Helvetica-Bold" if op.bold else "Helvetica", op.size)
            c.setFillGray(op.gray / 255)
            c.drawString(op.x * mm, _y(op.y), op.text)
        elif isinstance(op, RectOp):
            c.setStrokeGray(op.gray / 255)
            c.rect(op.x * mm, _y(op.y + op.height), op.width * mm, op.height * mm, stroke=1, fill=0)
        elif isinstance(op, CircleOp):
            c.setStrokeGray(0)
            c.circle(op.x * mm, _y(op.y), op.radius * mm, stroke=1, fill=0)
        elif isinstance(op, PageBreakOp):
            c.showPage()
    c.save()
    return buffer.getvalue()


__all__ = [
    "CircleOp",
    "DrawOp",
    "PageBreakOp",
    "PdfDocument",
    "RectOp",
    "TextOp",
    "admin_submission_pdf",
    "blank_form_pdf",
    "filled_form_pdf",
    "format_date",
    "owner_submission_pdf",
    "render_pdf",
    "title_filename",
]
