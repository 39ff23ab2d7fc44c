from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from loguru import logger

from webforms.config import Settings, build_upload_config, get_settings
from webforms.dependencies import get_http_client
from webforms.errors import UploadError
from webforms.models.upload import ImageUrlRequest, UploadErrorBody, UploadResult
from webforms.services.uploads import save_image_from_url, save_upload

router = APIRouter(prefix="/api", tags=["uploads"])


def _error_response(error: UploadError) -> JSONResponse:
    body = UploadErrorBody(error=error.error, details=error.detail)
    return JSONResponse(status_code=error.status_code, content=body.model_dump(exclude_none=True))


def _unexpected(e: Exception) -> JSONResponse:
    logger.exception("Upload failed unexpectedly")
    body = UploadErrorBody(error="Failed to upload image", details=f"{type(e).__name__}: {e}")
    return JSONResponse(status_code=500, content=body.model_dump())


@router.post("/upload", response_model=UploadResult)
async def upload_image(
    file: UploadFile | None = File(default=None),
    settings: Settings = Depends(get_settings),
):
    """Store an image sent as the multipart ``file`` field."""
    if file is None:
        return _error_response(UploadError(400, "No file provided"))

    config = build_upload_config(settings)
    try:
        # One byte past the limit is enough for save_upload to reject it
        data = await file.read(config.max_bytes + 1)
        url = save_upload(file.filename, data, config, file.content_type)
    except UploadError as e:
        return _error_response(e)
    except Exception as e:
        return _unexpected(e)

    return UploadResult(url=url)


@router.post("/upload-url", response_model=UploadResult)
async def upload_image_from_url(
    req: ImageUrlRequest,
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
):
    """Fetch an image from ``imageUrl`` and store it."""
    try:
        url = await save_image_from_url(req.image_url, build_upload_config(settings), http=http)
    except UploadError as e:
        return _error_response(e)
    except Exception as e:
        return _unexpected(e)

    return UploadResult(url=url)
