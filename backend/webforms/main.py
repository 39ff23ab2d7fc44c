import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from webforms.config import build_upload_config, get_settings
from webforms.models.upload import UploadErrorBody
from webforms.routers import forms, health, uploads
from webforms.services.uploads import ensure_upload_dir

settings = get_settings()

logger.remove()
logger.add(sys.stderr, level=settings.log_level.upper())

app = FastAPI(
    title="Robato Systems — Web Forms API",
    description="Contact/trial form emails via Brevo and blog image uploads",
    version="0.1.0",
)

# CORS — allow the website frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health.router)
app.include_router(forms.router)
app.include_router(uploads.router)


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    """Malformed bodies get each endpoint's own 400 error shape."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'] if part != 'body') or 'body'}: {err['msg']}"
        for err in exc.errors()
    )
    logger.info("Rejected malformed request to {}: {}", request.url.path, details)

    if request.url.path.startswith(uploads.router.prefix + "/upload"):
        body = UploadErrorBody(error="Invalid request", details=details)
        return JSONResponse(status_code=400, content=body.model_dump())
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "validation_error", "message": details},
    )


# Serve stored uploads at the same relative path the upload endpoints return
upload_config = build_upload_config(settings)
ensure_upload_dir(upload_config.root_dir)
app.mount(
    upload_config.url_prefix,
    StaticFiles(directory=upload_config.root_dir),
    name="uploads",
)

logger.info("Web Forms API started")
