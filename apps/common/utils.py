"""
Shared utilities for the application.
"""

import base64
import binascii
import re
from io import BytesIO
from typing import List, Tuple, Optional

import PIL.Image
from fastapi import UploadFile

from libs.llm_gemini import InlineImage

DEFAULT_IMAGE_MIME = "image/jpeg"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,")


def strip_data_url_prefix(payload: str) -> Tuple[Optional[str], str]:
    """
    Split an optional `data:<mime>;base64,` header off a Base64 payload.

    Returns (mime_type or None, raw_base64). A payload without the header
    passes through unchanged.
    """
    match = _DATA_URL_RE.match(payload)
    if not match:
        return None, payload
    return match.group("mime"), payload[match.end():]


def sniff_image_mime(data: bytes) -> str:
    """Detect the MIME type with Pillow, defaulting to JPEG."""
    try:
        with PIL.Image.open(BytesIO(data)) as img:
            fmt = img.format
    except (PIL.UnidentifiedImageError, OSError):
        return DEFAULT_IMAGE_MIME
    return PIL.Image.MIME.get(fmt or "", DEFAULT_IMAGE_MIME)


def decode_image_payload(payload: str) -> InlineImage:
    """
    Turn a Base64 string or data URL into an InlineImage.

    Raises ValueError when the payload is empty or not valid Base64.
    """
    if not payload or not payload.strip():
        raise ValueError("Empty image payload")
    mime, raw = strip_data_url_prefix(payload.strip())
    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid Base64 image payload: {e}") from e
    if not data:
        raise ValueError("Empty image payload")
    return InlineImage(mime_type=mime or sniff_image_mime(data), data=data)


def decode_images_b64(images_b64: List[str]) -> List[InlineImage]:
    """
    Decode a list of Base64 strings / data URLs, keeping submission order.

    Unlike a lenient decoder this raises on the first bad entry, so a batch
    never silently shrinks.
    """
    return [decode_image_payload(s) for s in images_b64 or []]


def image_from_bytes(data: bytes, content_type: Optional[str] = None) -> InlineImage:
    if content_type and content_type.startswith("image/"):
        return InlineImage(mime_type=content_type, data=data)
    return InlineImage(mime_type=sniff_image_mime(data), data=data)


async def read_upload_files(images: List[UploadFile]) -> List[InlineImage]:
    """Read a list of UploadFiles into InlineImages, skipping empty parts."""
    out: List[InlineImage] = []
    for f in images or []:
        data = await f.read()
        if not data:
            continue
        out.append(image_from_bytes(data, f.content_type))
    return out
