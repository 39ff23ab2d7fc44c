"""Form submission validation.

Pure checks with no network or disk access. Every failure raises
``ValidationError`` before the mailer makes any outbound call.
"""

from __future__ import annotations

import re

from webforms.errors import ValidationError
from webforms.models.forms import FormSubmission, FormType

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# (attribute, wire name) in the order they are checked
REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("first_name", "firstName"),
    ("last_name", "lastName"),
    ("email", "email"),
    ("phone", "phone"),
    ("message", "message"),
)


def is_valid_email(value: str | None) -> bool:
    """Return True for a basic ``local@domain.tld`` address."""
    if not value:
        return False
    return EMAIL_PATTERN.match(value) is not None


def validate_submission(submission: FormSubmission, form_type: str | None) -> FormType:
    """Check a submission and its declared form type.

    Returns:
        The parsed ``FormType``.

    Raises:
        ValidationError: on the first missing field, an invalid email, or an
            unrecognized form type, in that order.
    """
    for attr, wire_name in REQUIRED_FIELDS:
        value = getattr(submission, attr)
        if value is None or not str(value).strip():
            raise ValidationError(f"Missing required field: {wire_name}", field=wire_name)

    if not is_valid_email(submission.email):
        raise ValidationError("Invalid email address", field="email")

    try:
        return FormType(form_type)
    except ValueError:
        raise ValidationError(
            'Invalid form type. Must be "contact" or "trial"', field="formType"
        ) from None


def parse_cc_list(raw: str | None) -> list[str]:
    """Split a comma-separated address list, keeping valid unique entries in order."""
    if not raw:
        return []
    seen: set[str] = set()
    result: list[str] = []
    for part in raw.split(","):
        address = part.strip()
        if not address or not is_valid_email(address):
            continue
        key = address.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(address)
    return result
