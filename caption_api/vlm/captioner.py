"""
Purpose:
- Small interface every caption provider implements: one CaptionRequest in, one raw caption out.
- Helpers shared by providers to package the uploaded image (MIME type, base64, data URL).

Notes:
- Providers raise CaptionGenerationError for a failed image; the batch loop records it and moves on.
- MIME sniffing uses Pillow only when the upload did not say what it is.
"""

from __future__ import annotations
import base64
from io import BytesIO
from typing import Optional, Protocol

from PIL import Image, UnidentifiedImageError

from ..captions.batch import CaptionRequest

DEFAULT_CONTENT_TYPE = "image/jpeg"


class CaptionGenerator(Protocol):
    def generate(self, request: CaptionRequest) -> str:
        """Return the raw (unprocessed) caption text for one image."""


def sniff_content_type(payload: bytes, declared: Optional[str] = None) -> str:
    """
    Trust a declared image/* type; otherwise ask Pillow which format the bytes are.
    Unreadable payloads fall back to JPEG and are left for the provider to reject.
    """
    if declared and declared.startswith("image/"):
        return declared
    try:
        with Image.open(BytesIO(payload)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError):
        return DEFAULT_CONTENT_TYPE
    return Image.MIME.get(fmt or "", DEFAULT_CONTENT_TYPE)


def image_b64(request: CaptionRequest) -> str:
    return base64.b64encode(request.image).decode("ascii")


def image_data_url(request: CaptionRequest) -> str:
    return f"data:{request.content_type};base64,{image_b64(request)}"
