from __future__ import annotations

from typing import AsyncIterator

import httpx
from fastapi import Depends

from webforms.config import Settings, get_settings


async def get_http_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[httpx.AsyncClient]:
    """Request-scoped outbound HTTP client."""
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        yield client
