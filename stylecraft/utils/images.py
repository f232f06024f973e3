"""Helpers for user-uploaded garment photos.

Uploads are validated, optionally downscaled/re-encoded with Pillow and
returned as :class:`EncodedImage` payloads ready for the API.
"""
from __future__ import annotations

import io
import logging
import mimetypes
from pathlib import Path
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from stylecraft.models import EncodedImage

logger = logging.getLogger(__name__)

_VALID_IMAGE_PREFIX = "image/"
MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MB


def encode_upload(
    file_bytes: bytes,
    content_type: str,
    *,
    compress: bool = True,
    max_dim: int = 1024,
    quality: int = 85,
) -> EncodedImage:
    """Validate an uploaded photo and return it as an EncodedImage.

    Parameters
    ----------
    file_bytes : bytes
        Raw image bytes as uploaded.
    content_type : str
        Mime type, must start with ``image/``.
    compress : bool, optional
        If *True* (default) the image is resized to fit ``max_dim`` and
        re-encoded as JPEG at ``quality``.  Falls back to the original bytes
        when Pillow cannot decode the file.
    """

    if not content_type.startswith(_VALID_IMAGE_PREFIX):
        raise ValueError("Unsupported content_type; expected image/*, got %s" % content_type)

    if not file_bytes:
        raise ValueError("Image is empty.")

    if len(file_bytes) > MAX_UPLOAD_BYTES:
        raise ValueError("Image exceeds 10 MB size limit.")

    data, final_content_type = file_bytes, content_type
    if compress:
        try:
            data, final_content_type = _compress_image(file_bytes, max_dim=max_dim, quality=quality)
        except (UnidentifiedImageError, OSError) as exc:
            logger.warning("Image compression failed, using original bytes: %s", exc)

    return EncodedImage.from_bytes(data, final_content_type)


def load_upload(path: Path, **kwargs) -> EncodedImage:
    """Read a local photo and encode it like a browser upload."""

    content_type, _ = mimetypes.guess_type(path.name)
    return encode_upload(path.read_bytes(), content_type or "application/octet-stream", **kwargs)


def image_size(image: EncodedImage) -> Tuple[int, int]:
    """Return (width, height) of an encoded image."""

    with Image.open(io.BytesIO(image.raw_bytes())) as img:
        return img.size


def _compress_image(file_bytes: bytes, *, max_dim: int, quality: int) -> Tuple[bytes, str]:
    """Resize/compress image bytes using Pillow and return (bytes, new_content_type)."""

    with Image.open(io.BytesIO(file_bytes)) as img:
        img = img.convert("RGB")  # ensure RGB for JPEG
        width, height = img.size
        if max(width, height) > max_dim:
            img.thumbnail((max_dim, max_dim))
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality, optimize=True)
        return buffer.getvalue(), "image/jpeg"
