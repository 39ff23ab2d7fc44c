import re

import httpx
import pytest

from webforms.errors import UploadError
from webforms.services.uploads import (
    build_filename,
    ensure_upload_dir,
    infer_extension,
    sanitize_filename,
    save_image_from_url,
    save_upload,
)

TIMESTAMPED = re.compile(r"^/uploads/blogs/\d{13}-")


@pytest.mark.parametrize(
    "content_type, source, expected",
    [
        ("image/png", "https://cdn.example/photo.jpg", "png"),
        ("image/jpeg; charset=binary", None, "jpg"),
        ("image/svg+xml", "logo", "jpg"),
        ("text/html", "https://evil.example/page.html", "jpg"),
        ("application/octet-stream", "https://cdn.example/a/b/pic.webp?x=1", "webp"),
        (None, "holiday.JPEG", "jpg"),
        (None, "https://cdn.example/no-extension", "jpg"),
        (None, None, "jpg"),
    ],
)
def test_infer_extension(content_type, source, expected):
    assert infer_extension(content_type, source) == expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("my summer photo.png", "my-summer-photo.png"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\me\\pic.gif", "pic.gif"),
        ("<img>.png", "img.png"),
        ("", "image"),
        (None, "image"),
    ],
)
def test_sanitize_filename(name, expected):
    assert sanitize_filename(name) == expected


def test_build_filename_replaces_extension():
    assert build_filename("cover.jpeg", "png", now_ms=1700000000000) == "1700000000000-cover.png"
    assert build_filename(None, "jpg", now_ms=1) == "1-image.jpg"


def test_ensure_upload_dir_is_idempotent(tmp_path):
    target = tmp_path / "a" / "b"
    ensure_upload_dir(target)
    ensure_upload_dir(target)
    assert target.is_dir()


def test_save_upload_writes_file(upload_config):
    url = save_upload("team photo.png", b"PNGDATA", upload_config, "image/png")

    assert TIMESTAMPED.match(url)
    assert url.endswith("-team-photo.png")
    stored = upload_config.root_dir / url.rsplit("/", 1)[1]
    assert stored.read_bytes() == b"PNGDATA"


def test_save_upload_uses_content_type_when_name_has_no_extension(upload_config):
    url = save_upload("blob", b"GIF89a", upload_config, "image/gif")
    assert url.endswith("-blob.gif")


def test_save_upload_rejects_empty_and_oversized(upload_config):
    with pytest.raises(UploadError) as exc:
        save_upload("a.png", b"", upload_config)
    assert exc.value.status_code == 400

    small = upload_config.model_copy(update={"max_bytes": 3})
    with pytest.raises(UploadError) as exc:
        save_upload("a.png", b"1234", small)
    assert exc.value.status_code == 400


def test_save_upload_write_failure_is_500(upload_config, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file")
    broken = upload_config.model_copy(update={"root_dir": blocker / "uploads"})

    with pytest.raises(UploadError) as exc:
        save_upload("a.png", b"data", broken)

    assert exc.value.status_code == 500
    assert exc.value.error == "Failed to upload image"


async def test_url_upload_uses_content_type_extension(upload_config):
    def handler(request):
        return httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        url = await save_image_from_url("https://cdn.example/images/banner.jpg", upload_config, http=http)

    assert url.endswith("-banner.png")
    assert (upload_config.root_dir / url.rsplit("/", 1)[1]).read_bytes() == b"\x89PNG"


async def test_url_upload_falls_back_to_url_suffix(upload_config):
    def handler(request):
        return httpx.Response(200, content=b"RIFF", headers={"content-type": "application/octet-stream"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        url = await save_image_from_url("https://cdn.example/x/pic.webp", upload_config, http=http)

    assert url.endswith("-pic.webp")


@pytest.mark.parametrize("image_url", [None, "", "   "])
async def test_url_upload_requires_url(upload_config, image_url):
    async with httpx.AsyncClient() as http:
        with pytest.raises(UploadError) as exc:
            await save_image_from_url(image_url, upload_config, http=http)

    assert exc.value.status_code == 400
    assert exc.value.error == "No image URL provided"


async def test_url_upload_rejects_non_http_scheme(upload_config):
    async with httpx.AsyncClient() as http:
        with pytest.raises(UploadError) as exc:
            await save_image_from_url("file:///etc/passwd", upload_config, http=http)

    assert exc.value.status_code == 400


async def test_url_upload_fetch_failure_is_500(upload_config):
    def handler(request):
        return httpx.Response(404, text="missing")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(UploadError) as exc:
            await save_image_from_url("https://cdn.example/gone.png", upload_config, http=http)

    assert exc.value.status_code == 500
    assert not upload_config.root_dir.exists() or not any(upload_config.root_dir.iterdir())


@pytest.mark.parametrize(
    "name, content_type, suffix",
    [
        ("x.html", "text/html", "-x.jpg"),
        ("drawing.svg", "image/svg+xml", "-drawing.jpg"),
        ("page.htm", "image/png", "-page.png"),
        ("shell.php.gif", None, "-shell.php.gif"),
    ],
)
def test_save_upload_only_keeps_image_extensions(upload_config, name, content_type, suffix):
    url = save_upload(name, b"<script>alert(1)</script>", upload_config, content_type)

    assert url.endswith(suffix)
    assert not any(p.suffix in (".html", ".htm", ".svg") for p in upload_config.root_dir.iterdir())


async def test_url_upload_ignores_markup_suffix_without_image_type(upload_config):
    def handler(request):
        return httpx.Response(200, content=b"<html></html>", headers={"content-type": "text/html"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        url = await save_image_from_url("https://cdn.example/landing.html", upload_config, http=http)

    assert url.endswith("-landing.jpg")


async def test_url_upload_stops_reading_past_the_limit(upload_config):
    small = upload_config.model_copy(update={"max_bytes": 8})

    async def body():
        for _ in range(1000):
            yield b"0123456789"

    def handler(request):
        return httpx.Response(200, content=body(), headers={"content-type": "image/png"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(UploadError) as exc:
            await save_image_from_url("https://cdn.example/huge.png", small, http=http)

    assert exc.value.status_code == 400
    assert exc.value.error == "File too large"
    assert not small.root_dir.exists() or not any(small.root_dir.iterdir())
