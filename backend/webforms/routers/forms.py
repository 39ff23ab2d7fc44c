"""Contact and trial form submission endpoint."""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from webforms.config import Settings, get_settings
from webforms.dependencies import get_http_client
from webforms.models.forms import FormRequest
from webforms.services.form_mailer import submit_form

router = APIRouter(prefix="/api", tags=["forms"])

OUTCOME_STATUS = {
    "sent": 200,
    "validation_error": 400,
    "configuration_error": 500,
    "delivery_error": 502,
}


@router.post("/send-form-email")
async def send_form_email_endpoint(
    req: FormRequest,
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
):
    """Send the acknowledgement and operator emails for a form submission."""
    logger.info("Form submission received: type={}", req.form_type)

    outcome = await submit_form(req, settings, http=http)

    if outcome.success:
        return {"success": True, "message": outcome.message}

    body = {"success": False, "error": outcome.kind, "message": outcome.message}
    return JSONResponse(status_code=OUTCOME_STATUS[outcome.kind], content=body)
