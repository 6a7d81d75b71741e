"""Service-layer utilities."""

from .listing import category_chips, filter_forms
from .pdf_export import (
    admin_submission_pdf,
    blank_form_pdf,
    filled_form_pdf,
    owner_submission_pdf,
)
from .review import set_status
from .submissions import SubmissionView, submit
from .values import display_value

__all__ = [
    "SubmissionView",
    "admin_submission_pdf",
    "blank_form_pdf",
    "category_chips",
    "display_value",
    "filled_form_pdf",
    "filter_forms",
    "owner_submission_pdf",
    "set_status",
    "submit",
]
