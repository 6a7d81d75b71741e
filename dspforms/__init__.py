"""DSP Forms: publish forms, collect submissions, review and export them as PDFs."""
