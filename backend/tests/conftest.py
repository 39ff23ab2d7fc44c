"""Shared fixtures: settings without environment access and a fake HTTP layer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

from webforms.config import MailConfig, Settings, UploadConfig, build_mail_config, build_upload_config
from webforms.models.forms import FormRequest


class FakeHTTP:
    """Records outgoing requests and answers them from a queue of responses."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: list[httpx.Response | Callable[[httpx.Request], httpx.Response]] = []

    def queue(self, *responses: httpx.Response | Callable[[httpx.Request], httpx.Response]) -> None:
        self._responses.extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(500, json={"message": "no response queued"})
        response = self._responses.pop(0)
        return response(request) if callable(response) else response

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def json_bodies(self) -> list[dict | None]:
        return [json.loads(r.content) if r.content else None for r in self.requests]


@pytest.fixture
def fake_http() -> FakeHTTP:
    return FakeHTTP()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        brevo_api_key="test-key",
        admin_email="admin@robato.example",
        public_base_url="https://robato.example",
        cc_emails="sales@robato.example, not-valid, ops@robato.example",
        public_dir=tmp_path / "public",
    )


@pytest.fixture
def mail_config(settings: Settings) -> MailConfig:
    return build_mail_config(settings)


@pytest.fixture
def upload_config(settings: Settings) -> UploadConfig:
    return build_upload_config(settings)


@pytest.fixture
def form_data() -> dict:
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 7946 0000",
        "message": "We would like a quote.",
        "company": "Analytical Engines Ltd",
        "jobTitle": "CTO",
        "country": "UK",
    }


@pytest.fixture
def make_request(form_data: dict) -> Callable[..., FormRequest]:
    def _make(form_type: str | None = "contact", **overrides) -> FormRequest:
        data = {**form_data, **overrides}
        return FormRequest.model_validate({"formData": data, "formType": form_type})

    return _make


def brevo_ok(message_id: str = "<msg@brevo>") -> httpx.Response:
    return httpx.Response(201, json={"messageId": message_id})
