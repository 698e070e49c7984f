"""
Conversion of uploaded images (product photos, review photos) to WebP.
Validation by magic bytes, EXIF rotation and downscaling by the longest side.
"""
import io
from typing import Optional
from PIL import Image, ImageOps

DEFAULT_QUALITY = 85


def detect_image_format(content: bytes) -> Optional[str]:
    """Return "jpeg", "png" or "webp" by magic bytes, None for anything else."""
    if content.startswith(b'\xff\xd8\xff'):
        return "jpeg"
    if content.startswith(b'\x89PNG\r\n\x1a\n'):
        return "png"
    if content.startswith(b'RIFF') and b'WEBP' in content[:12]:
        return "webp"
    return None


def validate_image_content(content: bytes) -> bool:
    return detect_image_format(content) is not None


def convert_image_to_webp(content: bytes, max_side_px: int, quality: int = DEFAULT_QUALITY) -> bytes:
    """
    Convert an image to WebP, downscaling so the longest side is at most max_side_px.
    :raises ValueError: if the content is not a supported image or cannot be decoded.
    """
    if not validate_image_content(content):
        raise ValueError("file bukan gambar yang valid")
    try:
        img = Image.open(io.BytesIO(content))
        img.verify()
        img = Image.open(io.BytesIO(content))
        img = ImageOps.exif_transpose(img)
        if img.mode in ("RGBA", "P", "LA"):
            img = img.convert("RGB")
        w, h = img.size
        if max(w, h) > max_side_px:
            ratio = max_side_px / max(w, h)
            img = img.resize((int(w * ratio), int(h * ratio)), Image.Resampling.LANCZOS)
        out = io.BytesIO()
        img.save(out, "WEBP", quality=quality)
        return out.getvalue()
    except (OSError, SyntaxError) as e:
        raise ValueError("gambar tidak dapat diproses") from e
