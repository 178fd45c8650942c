"""Utility helpers for turning uploaded files into request-ready image blobs."""

from __future__ import annotations

import io
import mimetypes
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from modules.session.input_state import ImageBlob

FALLBACK_CONTENT_TYPE = "application/octet-stream"


def sniff_content_type(data: bytes) -> Optional[str]:
    """Detect an image MIME type from raw bytes without decoding pixel data."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return Image.MIME.get(image.format or "")
    except (UnidentifiedImageError, OSError):
        return None


def load_image_blob(path: Union[str, Path, None]) -> Optional[ImageBlob]:
    """Read an uploaded file as-is; ``None`` when nothing was uploaded."""
    if not path:
        return None
    file_path = Path(path)
    data = file_path.read_bytes()
    content_type = (
        mimetypes.guess_type(file_path.name)[0]
        or sniff_content_type(data)
        or FALLBACK_CONTENT_TYPE
    )
    return ImageBlob(filename=file_path.name, content_type=content_type, data=data)
