"""Contact/trial form email flow.

1. Validate the submission and form type
2. Escape every field
3. Render the acknowledgement and the operator notification
4. Send the acknowledgement to the submitter
5. Send the notification to the operator (CC list, reply-to submitter)

The two sends are sequential. If the notification fails after the
acknowledgement went out, nothing is rolled back.
"""

from __future__ import annotations

import httpx
from loguru import logger

from webforms.config import MailConfig, Settings, build_mail_config
from webforms.errors import ConfigurationError, DeliveryError, ValidationError
from webforms.models.email import RecipientSet, RenderedEmail, Sender
from webforms.models.forms import FormRequest, FormType, SubmissionOutcome
from webforms.services.brevo_client import BrevoClient
from webforms.services.sanitizer import sanitize_submission
from webforms.services.templates import Branding, fetch_logo_data_uri, render_form_emails
from webforms.services.validation import validate_submission

SUCCESS_MESSAGE = "Emails sent successfully"


def build_form_emails(
    request: FormRequest,
    config: MailConfig,
    logo_src: str | None = None,
) -> tuple[RenderedEmail, RenderedEmail]:
    """Validate and render both emails for a submission.

    Returns:
        (acknowledgement to the submitter, notification to the operator)

    Raises:
        ValidationError: the submission or form type is invalid.
    """
    form_type = validate_submission(request.form_data, request.form_type)
    return _render_emails(request, form_type, config, logo_src)


def _render_emails(
    request: FormRequest,
    form_type: FormType,
    config: MailConfig,
    logo_src: str | None,
) -> tuple[RenderedEmail, RenderedEmail]:
    fields = sanitize_submission(request.form_data)
    branding = Branding(
        company_name=config.company_name,
        theme_color=config.theme_color,
        base_url=config.base_url,
        logo_src=logo_src or config.logo_url,
    )
    rendered = render_form_emails(form_type, fields, branding)
    sender = Sender(email=config.admin_email, name=config.company_name)
    submitter = request.form_data.email.strip()

    acknowledgement = RenderedEmail(
        subject=rendered.user_subject,
        html=rendered.user_html,
        recipients=RecipientSet(to=(submitter,), reply_to=config.reply_to),
        sender=sender,
    )
    notification = RenderedEmail(
        subject=rendered.admin_subject,
        html=rendered.admin_html,
        recipients=RecipientSet(
            to=(config.admin_email,),
            cc=config.cc_emails,
            reply_to=submitter,
        ),
        sender=sender,
    )
    return acknowledgement, notification


async def send_form_email(
    request: FormRequest,
    config: MailConfig,
    *,
    client: BrevoClient,
    http: httpx.AsyncClient | None = None,
) -> dict:
    """Validate, render and deliver the two emails for one form submission.

    Args:
        request: The posted form data and form type.
        config: Resolved mail configuration.
        client: Brevo client used for both sends.
        http: Client used to fetch the logo when ``config.embed_logo`` is set.

    Raises:
        ValidationError: before any network call.
        DeliveryError: on the first failed send; later sends are skipped.
    """
    # Validate before touching the network, including the optional logo fetch
    form_type = validate_submission(request.form_data, request.form_type)

    logo_src = None
    if config.embed_logo and http is not None:
        logo_src = await fetch_logo_data_uri(http, config.logo_url)

    acknowledgement, notification = _render_emails(request, form_type, config, logo_src)

    await client.send_rendered(acknowledgement)
    try:
        await client.send_rendered(notification)
    except DeliveryError:
        logger.warning(
            "Submitter {} was acknowledged but the operator notification failed",
            acknowledgement.recipients.to[0],
        )
        raise

    logger.info("Form '{}' emails delivered for {}", request.form_type, acknowledgement.recipients.to[0])
    return {"success": True, "message": SUCCESS_MESSAGE}


async def submit_form(
    request: FormRequest,
    settings: Settings,
    *,
    http: httpx.AsyncClient | None = None,
) -> SubmissionOutcome:
    """Run the form email flow and report its outcome as a tagged value."""
    try:
        config = build_mail_config(settings)
    except ConfigurationError as e:
        logger.error("Mail configuration invalid: {}", e)
        return SubmissionOutcome(kind="configuration_error", success=False, message=str(e))

    try:
        async with BrevoClient(config.api_key, config.api_url, http=http, timeout=config.timeout) as brevo:
            result = await send_form_email(request, config, client=brevo, http=http)
    except ValidationError as e:
        logger.info("Rejected form submission: {}", e)
        return SubmissionOutcome(kind="validation_error", success=False, message=str(e))
    except DeliveryError as e:
        return SubmissionOutcome(
            kind="delivery_error",
            success=False,
            message=str(e),
            status_code=e.status_code,
        )

    return SubmissionOutcome(kind="sent", success=True, message=result["message"])
