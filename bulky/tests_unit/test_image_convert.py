"""
Tests for image conversion (core.image_convert).

The same converter runs for product photos and review photos uploaded
through core.uploads.save_image_upload.
"""
import io

import pytest
from PIL import Image

from bulky.app.core.image_convert import (
    convert_image_to_webp,
    detect_image_format,
    validate_image_content,
)


def _image_bytes(width: int, height: int, fmt: str = "PNG", mode: str = "RGB") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, (width, height), color=(128, 128, 128) if mode == "RGB" else (128, 128, 128, 100)).save(
        buf, format=fmt
    )
    return buf.getvalue()


# --- detect_image_format / validate_image_content ---


def test_detect_jpeg_png_webp():
    assert detect_image_format(b'\xff\xd8\xff' + b'\x00' * 10) == "jpeg"
    assert detect_image_format(b'\x89PNG\r\n\x1a\n' + b'\x00' * 10) == "png"
    assert detect_image_format(b'RIFF' + b'\x00' * 4 + b'WEBP') == "webp"


def test_gif_is_not_accepted():
    """Only JPEG, PNG and WebP are accepted uploads."""
    assert detect_image_format(b'GIF89a' + b'\x00' * 10) is None
    assert validate_image_content(b'GIF89a' + b'\x00' * 10) is False


def test_validate_image_content_invalid():
    assert validate_image_content(b'') is False
    assert validate_image_content(b'not an image') is False


# --- convert_image_to_webp ---


def test_output_is_webp():
    out = convert_image_to_webp(_image_bytes(100, 100), max_side_px=1200)
    assert out.startswith(b'RIFF')
    assert b'WEBP' in out[:12]


def test_large_image_downscaled_by_longest_side():
    # 2000 x 1000 with max_side_px=1200 becomes 1200 x 600
    out = convert_image_to_webp(_image_bytes(2000, 1000), max_side_px=1200)
    assert Image.open(io.BytesIO(out)).size == (1200, 600)


def test_small_image_keeps_size():
    out = convert_image_to_webp(_image_bytes(300, 200, fmt="JPEG"), max_side_px=1200)
    assert Image.open(io.BytesIO(out)).size == (300, 200)


def test_png_with_alpha_converted():
    out = convert_image_to_webp(_image_bytes(50, 50, mode="RGBA"), max_side_px=1200)
    assert Image.open(io.BytesIO(out)).format == "WEBP"


def test_invalid_content_raises():
    with pytest.raises(ValueError):
        convert_image_to_webp(b'not an image', max_side_px=1200)


def test_truncated_png_raises():
    """Valid magic bytes but a broken body."""
    with pytest.raises(ValueError):
        convert_image_to_webp(b'\x89PNG\r\n\x1a\n' + b'\x00' * 32, max_side_px=1200)
