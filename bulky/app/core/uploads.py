"""Storing uploaded images under UPLOAD_PATH, served by the /uploads static mount."""
import uuid
from typing import Optional
from pathlib import Path

from fastapi import UploadFile

from bulky.app.core.constants import MAX_IMAGE_BYTES, UPLOAD_MAX_SIDE_PX
from bulky.app.core.exceptions import ServiceError
from bulky.app.core.image_convert import convert_image_to_webp
from bulky.app.core.logging import get_logger
from bulky.app.core.settings import get_settings

logger = get_logger(__name__)

UPLOAD_URL_PREFIX = "/uploads"


async def save_image_upload(file: UploadFile, subdir: str, allowed_extensions: set[str]) -> str:
    """
    Validate an uploaded image, convert it to WebP and store it.
    Returns the public URL path, e.g. "/uploads/ulasan/<hex>.webp".
    """
    if not file.filename:
        raise ServiceError("file tidak boleh kosong")
    ext = Path(file.filename).suffix.lower()
    if ext not in allowed_extensions:
        allowed = ", ".join(sorted(e.lstrip(".") for e in allowed_extensions))
        raise ServiceError(f"format file harus {allowed}")
    content = await file.read()
    if len(content) > MAX_IMAGE_BYTES:
        raise ServiceError("ukuran file maksimal 2MB")
    try:
        content = convert_image_to_webp(content, UPLOAD_MAX_SIDE_PX)
    except ValueError as e:
        raise ServiceError(str(e)) from e

    target_dir = get_settings().upload_dir / subdir
    target_dir.mkdir(parents=True, exist_ok=True)
    name = f"{uuid.uuid4().hex}.webp"
    (target_dir / name).write_bytes(content)
    logger.info("Image uploaded", subdir=subdir, file=name, size=len(content))
    return f"{UPLOAD_URL_PREFIX}/{subdir}/{name}"


def remove_upload(url: Optional[str]) -> None:
    """Delete a previously stored upload; unknown or external URLs are ignored."""
    if not url or not url.startswith(UPLOAD_URL_PREFIX + "/"):
        return
    path = get_settings().upload_dir / url[len(UPLOAD_URL_PREFIX) + 1:]
    path.unlink(missing_ok=True)
