from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from markupsafe import Markup
from pydantic import BaseModel, ConfigDict, Field


class FormType(str, Enum):
    CONTACT = "contact"
    TRIAL = "trial"


class FormSubmission(BaseModel):
    """Raw web form fields as posted by the site.

    Required fields default to None; ``validate_submission`` reports the first
    missing one.
    """

    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    email: str | None = None
    phone: str | None = None
    message: str | None = None
    company: str | None = None
    job_title: str | None = Field(default=None, alias="jobTitle")
    country: str | None = None

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class FormRequest(BaseModel):
    """Request body for the form email endpoint."""

    form_data: FormSubmission = Field(default_factory=FormSubmission, alias="formData")
    form_type: str | None = Field(default=None, alias="formType")

    model_config = ConfigDict(populate_by_name=True)


@dataclass(frozen=True)
class SafeFields:
    """Submission fields after HTML escaping, ready for template interpolation."""

    first_name: Markup
    last_name: Markup
    email: Markup
    phone: Markup
    message: Markup
    company: Markup
    job_title: Markup
    country: Markup

    @property
    def full_name(self) -> Markup:
        return Markup(f"{self.first_name} {self.last_name}")


class SubmissionOutcome(BaseModel):
    """Result of a form submission, tagged by outcome kind."""

    kind: Literal["sent", "configuration_error", "validation_error", "delivery_error"]
    success: bool
    message: str
    status_code: int | None = None  # Brevo status for delivery errors
