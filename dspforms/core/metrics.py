"""Prometheus counters for form intake, review and export."""

from prometheus_client import Counter, Histogram

FORMS_CREATED = Counter(
    "dspforms_forms_created_total",
    "Form definitions created by administrators.",
)
FORMS_DELETED = Counter(
    "dspforms_forms_deleted_total",
    "Form definitions deleted by administrators.",
)
SUBMISSIONS_RECEIVED = Counter(
    "dspforms_submissions_total",
    "Submission attempts by outcome.",
    ["outcome"],
)
STATUS_CHANGES = Counter(
    "dspforms_status_changes_total",
    "Submission review status changes by target status.",
    ["status"],
)
PDF_EXPORTS = Counter(
    "dspforms_pdf_exports_total",
    "PDF documents rendered, by variant.",
    ["variant"],
)
PDF_RENDER_SECONDS = Histogram(
    "dspforms_pdf_render_seconds",
    "Time spent turning draw instructions into PDF bytes.",
)

__all__ = [
    "FORMS_CREATED",
    "FORMS_DELETED",
    "PDF_EXPORTS",
    "PDF_RENDER_SECONDS",
    "STATUS_CHANGES",
    "SUBMISSIONS_RECEIVED",
]
