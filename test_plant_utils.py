"""
Image payload helper tests.
"""

import base64
from io import BytesIO

import PIL.Image
import pytest

from apps.common.utils import (
    decode_image_payload,
    decode_images_b64,
    image_from_bytes,
    sniff_image_mime,
    strip_data_url_prefix,
)


def _png_bytes() -> bytes:
    buf = BytesIO()
    PIL.Image.new("RGB", (2, 2), color=(0, 128, 0)).save(buf, format="PNG")
    return buf.getvalue()


def test_strip_prefix():
    assert strip_data_url_prefix("data:image/png;base64,QUJD") == ("image/png", "QUJD")
    assert strip_data_url_prefix("QUJD") == (None, "QUJD")


def test_sniff_png_and_fallback():
    assert sniff_image_mime(_png_bytes()) == "image/png"
    assert sniff_image_mime(b"definitely not an image") == "image/jpeg"


def test_decode_plain_base64_sniffs_mime():
    png = _png_bytes()
    img = decode_image_payload(base64.b64encode(png).decode())
    assert img.data == png
    assert img.mime_type == "image/png"


def test_declared_mime_wins():
    raw = base64.b64encode(b"abc").decode()
    img = decode_image_payload(f"data:image/webp;base64,{raw}")
    assert img.mime_type == "image/webp"
    assert img.data == b"abc"


@pytest.mark.parametrize("payload", ["", "   ", "@@not base64@@"])
def test_bad_payload_raises(payload):
    with pytest.raises(ValueError):
        decode_image_payload(payload)


def test_batch_decode_fails_on_any_bad_entry():
    good = base64.b64encode(b"abc").decode()
    assert len(decode_images_b64([good, good])) == 2
    with pytest.raises(ValueError):
        decode_images_b64([good, "@@"])


def test_image_from_bytes_prefers_image_content_type():
    assert image_from_bytes(b"abc", "image/heic").mime_type == "image/heic"
    assert image_from_bytes(b"abc", "application/octet-stream").mime_type == "image/jpeg"
