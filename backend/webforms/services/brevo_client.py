"""Brevo transactional email API client.

One POST per email, one attempt per call. Non-2xx responses and bodies
without the expected JSON object shape are raised as ``DeliveryError``.
"""

from __future__ import annotations

from typing import Any, Sequence

import httpx
from loguru import logger

from webforms.errors import DeliveryError
from webforms.models.email import RenderedEmail, Sender

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


class BrevoClient:
    """Async HTTP client for the Brevo ``/smtp/email`` endpoint.

    Usage::

        async with BrevoClient(api_key) as brevo:
            await brevo.send_email(["user@example.com"], "Hi", "<p>Hi</p>", sender, "ops@example.com")

    An ``http`` client passed in is borrowed and left open on exit.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = BREVO_API_URL,
        *,
        http: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)

    def _build_headers(self) -> dict[str, str]:
        return {
            "api-key": self._api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    # -- Context manager ---------------------------------------------------

    async def __aenter__(self) -> BrevoClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._owns_http:
            await self._http.aclose()

    # -- Sending -----------------------------------------------------------

    @staticmethod
    def build_payload(
        to: Sequence[str],
        subject: str,
        html: str,
        sender: Sender,
        reply_to: str,
        cc: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "sender": {"email": sender.email, "name": sender.name},
            "to": [{"email": address} for address in to],
            "replyTo": {"email": reply_to},
            "subject": subject,
            "htmlContent": html,
        }
        if cc:
            payload["cc"] = [{"email": address} for address in cc]
        return payload

    async def send_email(
        self,
        to: Sequence[str],
        subject: str,
        html: str,
        sender: Sender,
        reply_to: str,
        cc: Sequence[str] | None = None,
    ) -> dict:
        """Send one email and return Brevo's JSON response (e.g. ``messageId``).

        Raises:
            DeliveryError: transport failure, non-2xx status, or a body that
                is not a JSON object.
        """
        payload = self.build_payload(to, subject, html, sender, reply_to, cc)
        logger.info("Sending '{}' to {} (cc={})", subject, ", ".join(to), len(cc or ()))
        logger.debug("Brevo payload: {} bytes of HTML", len(html))

        try:
            resp = await self._http.post(self._api_url, json=payload, headers=self._build_headers())
        except httpx.HTTPError as e:
            logger.error("Brevo request failed: {}", e)
            raise DeliveryError(None, f"{type(e).__name__}: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        if not 200 <= resp.status_code < 300:
            message = body.get("message") if isinstance(body, dict) else None
            detail = message or resp.text[:500] or resp.reason_phrase
            logger.error("Brevo error {}: {}", resp.status_code, detail)
            raise DeliveryError(resp.status_code, detail)

        if not isinstance(body, dict):
            logger.error("Brevo returned {} with an unexpected body: {}", resp.status_code, resp.text[:200])
            raise DeliveryError(resp.status_code, "Unexpected response body from Brevo")

        logger.info("Email '{}' accepted by Brevo (messageId={})", subject, body.get("messageId"))
        return body

    async def send_rendered(self, email: RenderedEmail) -> dict:
        return await self.send_email(
            to=email.recipients.to,
            subject=email.subject,
            html=email.html,
            sender=email.sender,
            reply_to=email.recipients.reply_to,
            cc=email.recipients.cc,
        )
