"""Email rendering for the contact and trial forms.

Each form type has a pair of static templates: an acknowledgement for the
submitter and a notification for the operator. Both are rendered on every
call from already-escaped ``SafeFields``.
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import NamedTuple

import httpx
from jinja2 import Environment, FileSystemLoader
from loguru import logger
from pydantic import BaseModel

from webforms.models.forms import FormType, SafeFields

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

USER_SUBJECTS = {
    FormType.CONTACT: "Thank you for contacting us",
    FormType.TRIAL: "Thank you for booking a demo",
}

ADMIN_SUBJECT_PREFIXES = {
    FormType.CONTACT: "New Contact Form Submission",
    FormType.TRIAL: "New Trial Form Submission",
}


class Branding(BaseModel):
    """Static branding interpolated into every email."""

    company_name: str
    theme_color: str
    base_url: str
    logo_src: str  # absolute URL or data: URI

    model_config = {"frozen": True}


class RenderedTemplates(NamedTuple):
    user_subject: str
    user_html: str
    admin_subject: str
    admin_html: str


def _environment() -> Environment:
    return Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=True)


def render_form_emails(
    form_type: FormType,
    fields: SafeFields,
    branding: Branding,
) -> RenderedTemplates:
    """Render the submitter and operator emails for a form type."""
    env = _environment()
    template_vars = {"fields": fields, "branding": branding}

    user_html = env.get_template(f"{form_type.value}_welcome.html").render(**template_vars)
    admin_html = env.get_template(f"{form_type.value}_admin.html").render(**template_vars)

    return RenderedTemplates(
        user_subject=USER_SUBJECTS[form_type],
        user_html=user_html,
        admin_subject=f"{ADMIN_SUBJECT_PREFIXES[form_type]}: {fields.full_name}",
        admin_html=admin_html,
    )


async def fetch_logo_data_uri(http: httpx.AsyncClient, logo_url: str) -> str | None:
    """Download the logo and return it as a base64 data URI.

    Returns None when the logo cannot be fetched; callers fall back to the URL.
    """
    try:
        resp = await http.get(logo_url)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Could not fetch logo {} for embedding: {}", logo_url, e)
        return None

    content_type = resp.headers.get("content-type", "image/png").split(";", 1)[0].strip()
    encoded = base64.b64encode(resp.content).decode("ascii")
    logger.debug("Embedded logo ({} bytes, {})", len(resp.content), content_type)
    return f"data:{content_type};base64,{encoded}"
