from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings

from webforms.errors import ConfigurationError
from webforms.services.validation import is_valid_email, parse_cc_list


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Email — Brevo transactional API
    brevo_api_key: str = Field(default="", description="Brevo API key")
    brevo_api_url: str = Field(
        default="https://api.brevo.com/v3/smtp/email",
        description="Brevo transactional email endpoint",
    )
    admin_email: str = Field(default="", description="Operator address, also used as sender")
    public_base_url: str = Field(
        default="",
        validation_alias=AliasChoices("public_base_url", "next_public_base_url"),
        description="Public website URL used for links and the logo",
    )
    cc_emails: str = Field(default="", description="Comma-separated CC list for operator copies")
    reply_to_email: str = Field(default="", description="Reply-to for acknowledgements (defaults to admin)")
    http_timeout: float = Field(default=30.0, description="Outbound HTTP timeout in seconds")

    # Branding
    company_name: str = Field(default="Robato Systems", description="Sender name and email heading")
    theme_color: str = Field(default="#3c0366", description="Primary color used in email markup")
    logo_path: str = Field(default="/web-logo.png", description="Logo path relative to the base URL")
    embed_logo: bool = Field(default=False, description="Inline the logo as a data URI")

    # Uploads
    public_dir: Path = Field(default=Path("public"), description="Directory served as static files")
    upload_subdir: str = Field(default="uploads/blogs", description="Upload path under public_dir")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, description="Upload size limit")

    # HTTP server
    cors_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        description="Comma-separated allowed CORS origins",
    )
    log_level: str = Field(default="INFO", description="Loguru stderr sink level")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class MailConfig(BaseModel):
    """Resolved, validated configuration for one form submission."""

    api_key: str
    api_url: str
    admin_email: str
    base_url: str
    cc_emails: tuple[str, ...] = ()
    reply_to: str
    company_name: str
    theme_color: str
    logo_path: str
    embed_logo: bool = False
    timeout: float = 30.0

    model_config = {"frozen": True}

    @property
    def logo_url(self) -> str:
        return f"{self.base_url}{self.logo_path}"


class UploadConfig(BaseModel):
    """Where uploads are written and how they are addressed publicly."""

    root_dir: Path
    url_prefix: str
    max_bytes: int

    model_config = {"frozen": True}


def build_mail_config(settings: Settings) -> MailConfig:
    """Resolve the mail configuration, failing on the first missing value.

    Raises:
        ConfigurationError: a required variable is unset or the reply-to
            address is not a valid email.
    """
    required = (
        ("BREVO_API_KEY", settings.brevo_api_key),
        ("ADMIN_EMAIL", settings.admin_email),
        ("PUBLIC_BASE_URL", settings.public_base_url),
    )
    for env_name, value in required:
        if not value or not value.strip():
            raise ConfigurationError(f"{env_name} environment variable is not set")

    admin_email = settings.admin_email.strip()
    reply_to = settings.reply_to_email.strip() or admin_email
    if not is_valid_email(reply_to):
        raise ConfigurationError("Invalid REPLY_TO_EMAIL address")

    return MailConfig(
        api_key=settings.brevo_api_key.strip(),
        api_url=settings.brevo_api_url,
        admin_email=admin_email,
        base_url=settings.public_base_url.strip().rstrip("/"),
        cc_emails=tuple(parse_cc_list(settings.cc_emails)),
        reply_to=reply_to,
        company_name=settings.company_name,
        theme_color=settings.theme_color,
        logo_path=settings.logo_path,
        embed_logo=settings.embed_logo,
        timeout=settings.http_timeout,
    )


def build_upload_config(settings: Settings) -> UploadConfig:
    subdir = settings.upload_subdir.strip("/")
    return UploadConfig(
        root_dir=settings.public_dir / subdir,
        url_prefix=f"/{subdir}",
        max_bytes=settings.max_upload_bytes,
    )


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process; tests override this dependency."""
    return Settings()
