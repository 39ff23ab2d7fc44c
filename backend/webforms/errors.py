"""Error taxonomy shared by the email and upload flows.

Callers distinguish failures by type; the HTTP layer maps each type to a
status code.
"""

from __future__ import annotations


class WebFormsError(Exception):
    """Base class for every error raised by this service."""


class ConfigurationError(WebFormsError):
    """A required setting is missing or invalid."""


class ValidationError(WebFormsError):
    """A form submission failed validation before any network call."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class DeliveryError(WebFormsError):
    """Raised when Brevo returns a non-2xx or malformed response."""

    def __init__(self, status_code: int | None, detail: str):
        self.status_code = status_code
        self.detail = detail
        if status_code is None:
            super().__init__(f"Email delivery failed: {detail}")
        else:
            super().__init__(f"Email delivery failed: Brevo Error {status_code}: {detail}")


class UploadError(WebFormsError):
    """An image could not be read, fetched or written."""

    def __init__(self, status_code: int, error: str, detail: str | None = None):
        self.status_code = status_code
        self.error = error
        self.detail = detail
        super().__init__(f"{error}: {detail}" if detail else error)
