"""HTML escaping for user-supplied form values.

This is the only path from untrusted input into email markup. Values come
back as ``Markup`` so the Jinja environment's autoescape leaves them as-is,
while anything that skipped this step still gets escaped by autoescape.
"""

from __future__ import annotations

from typing import Any

from markupsafe import Markup

from webforms.models.forms import FormSubmission, SafeFields

_ENTITIES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#039;",
    }
)

NOT_AVAILABLE = "N/A"


def escape_html(value: Any) -> Markup:
    """Escape ``& < > " '``; ``None`` and empty values become an empty string."""
    if value is None or value == "":
        return Markup("")
    return Markup(str(value).translate(_ENTITIES))


def _or_default(value: str | None) -> str:
    if value is None or not str(value).strip():
        return NOT_AVAILABLE
    return value


def sanitize_submission(submission: FormSubmission) -> SafeFields:
    """Escape every field of a submission, defaulting optional ones to N/A."""
    return SafeFields(
        first_name=escape_html(submission.first_name),
        last_name=escape_html(submission.last_name),
        email=escape_html(submission.email),
        phone=escape_html(submission.phone),
        message=escape_html(submission.message),
        company=escape_html(_or_default(submission.company)),
        job_title=escape_html(_or_default(submission.job_title)),
        country=escape_html(_or_default(submission.country)),
    )
