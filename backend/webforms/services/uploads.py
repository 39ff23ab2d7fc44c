"""Image upload storage.

Accepts raw bytes from a multipart upload or fetches them from a remote URL,
writes them under the public upload directory with a millisecond timestamp
prefix, and returns the relative public URL.
"""

from __future__ import annotations

import re
import time
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

import httpx
from loguru import logger

from webforms.config import UploadConfig
from webforms.errors import UploadError

CONTENT_TYPE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/pjpeg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/avif": "avif",
    "image/bmp": "bmp",
    "image/x-icon": "ico",
    "image/vnd.microsoft.icon": "ico",
    "image/tiff": "tiff",
}

# Raster image types only; any other suffix falls back to the content type or jpg
ALLOWED_EXTENSIONS = frozenset(CONTENT_TYPE_EXTENSIONS.values()) | {"jpeg"}

DEFAULT_EXTENSION = "jpg"
DEFAULT_STEM = "image"

_WHITESPACE = re.compile(r"\s+")
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def ensure_upload_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def sanitize_filename(name: str | None) -> str:
    """Reduce a client or URL supplied name to a safe single path segment."""
    if not name:
        return DEFAULT_STEM
    base = PurePosixPath(name.replace("\\", "/")).name
    base = _WHITESPACE.sub("-", base.strip())
    base = _UNSAFE_CHARS.sub("", base).strip(".")
    return base or DEFAULT_STEM


def _suffix(name: str) -> str | None:
    suffix = PurePosixPath(name).suffix.lstrip(".").lower()
    if suffix in ALLOWED_EXTENSIONS:
        return "jpg" if suffix == "jpeg" else suffix
    return None


def extension_for_content_type(content_type: str | None) -> str | None:
    if not content_type:
        return None
    media_type = content_type.split(";", 1)[0].strip().lower()
    return CONTENT_TYPE_EXTENSIONS.get(media_type)


def infer_extension(content_type: str | None, url_or_name: str | None) -> str:
    """Pick a file extension: content type first, then the path suffix, then jpg."""
    from_type = extension_for_content_type(content_type)
    if from_type:
        return from_type
    if url_or_name:
        path = urlparse(url_or_name).path if "://" in url_or_name else url_or_name
        from_path = _suffix(path)
        if from_path:
            return from_path
    return DEFAULT_EXTENSION


def build_filename(original: str | None, extension: str, now_ms: int | None = None) -> str:
    """Return ``{ms}-{stem}.{ext}`` for a sanitized original name."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    safe = sanitize_filename(original)
    stem = PurePosixPath(safe).stem if PurePosixPath(safe).suffix else safe
    return f"{now_ms}-{stem or DEFAULT_STEM}.{extension}"


def _too_large(config: UploadConfig, size: str) -> UploadError:
    return UploadError(400, "File too large", f"{size} bytes exceeds the {config.max_bytes} byte limit")


def _write(config: UploadConfig, filename: str, data: bytes) -> str:
    try:
        ensure_upload_dir(config.root_dir)
        target = config.root_dir / filename
        target.write_bytes(data)
    except OSError as e:
        logger.error("Failed to write upload {}: {}", filename, e)
        raise UploadError(500, "Failed to upload image", f"Could not write file: {e}") from e

    url = f"{config.url_prefix}/{filename}"
    logger.info("Stored upload {} ({} bytes) at {}", filename, len(data), target)
    return url


def save_upload(
    filename: str | None,
    data: bytes,
    config: UploadConfig,
    content_type: str | None = None,
) -> str:
    """Store a multipart file upload and return its public path."""
    if not data:
        raise UploadError(400, "No file provided", "Uploaded file is empty")
    if len(data) > config.max_bytes:
        raise _too_large(config, str(len(data)))

    extension = _suffix(sanitize_filename(filename)) or infer_extension(content_type, None)
    return _write(config, build_filename(filename, extension), data)


async def save_image_from_url(
    image_url: str | None,
    config: UploadConfig,
    *,
    http: httpx.AsyncClient,
) -> str:
    """Fetch a remote image and store it; the response content type sets the extension."""
    if not image_url or not image_url.strip():
        raise UploadError(400, "No image URL provided")

    image_url = image_url.strip()
    parsed = urlparse(image_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise UploadError(400, "Invalid image URL", f"Unsupported URL: {image_url}")

    logger.info("Fetching image from {}", image_url)
    buffer = bytearray()
    try:
        async with http.stream("GET", image_url, follow_redirects=True) as resp:
            resp.raise_for_status()
            content_type = resp.headers.get("content-type")
            async for chunk in resp.aiter_bytes():
                buffer.extend(chunk)
                if len(buffer) > config.max_bytes:
                    raise _too_large(config, str(len(buffer)))
    except httpx.HTTPError as e:
        logger.error("Image fetch failed for {}: {}", image_url, e)
        raise UploadError(500, "Failed to upload image", f"Could not fetch image: {e}") from e

    data = bytes(buffer)
    if not data:
        raise UploadError(500, "Failed to upload image", "Remote image is empty")

    extension = infer_extension(content_type, image_url)
    original = PurePosixPath(parsed.path).name or DEFAULT_STEM
    return _write(config, build_filename(original, extension), data)
