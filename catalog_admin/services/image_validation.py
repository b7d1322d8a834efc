from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass

from catalog_admin.core.config import settings
from catalog_admin.core.errors import ValidationError

logger = logging.getLogger(__name__)

REASON_INVALID_BASE64 = "invalid_base64"
REASON_EMPTY_DATA = "empty_data"
REASON_TOO_LARGE = "too_large"
REASON_UNSUPPORTED_TYPE = "unsupported_image_type"
REASON_MIME_MISMATCH = "mime_mismatch"

_REASON_MESSAGES = {
    REASON_INVALID_BASE64: "Image data is not valid base64",
    REASON_EMPTY_DATA: "Image data is empty",
    REASON_TOO_LARGE: "Image exceeds the maximum allowed size",
    REASON_UNSUPPORTED_TYPE: "Unsupported image type",
    REASON_MIME_MISMATCH: "Declared image MIME type does not match the image content",
}

SUPPORTED_IMAGE_MIME_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp", "image/bmp")


@dataclass(frozen=True)
class ImageCheck:
    ok: bool
    mime: str | None = None
    size: int = 0
    data: bytes | None = None
    reason: str | None = None


def detect_image_mime_type(data: bytes) -> str | None:
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xFF\xD8\xFF"):
        return "image/jpeg"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data.startswith(b"BM"):
        return "image/bmp"
    return None


def _decode_base64(text: str) -> bytes:
    compact = "".join(str(text or "").split())
    # Clients may send unpadded base64.
    compact += "=" * (-len(compact) % 4)
    return base64.b64decode(compact, validate=True)


def validate_base64_image(encoded: str, declared_mime: str | None = None, max_bytes: int | None = None) -> ImageCheck:
    limit = max_bytes if max_bytes is not None else settings.max_image_bytes
    try:
        data = _decode_base64(encoded)
    except (binascii.Error, ValueError):
        return ImageCheck(ok=False, reason=REASON_INVALID_BASE64)
    if not data:
        return ImageCheck(ok=False, reason=REASON_EMPTY_DATA)
    if len(data) > limit:
        return ImageCheck(ok=False, reason=REASON_TOO_LARGE, size=len(data))

    detected = detect_image_mime_type(data)
    if detected is None:
        return ImageCheck(ok=False, reason=REASON_UNSUPPORTED_TYPE, size=len(data))

    normalized_declared = str(declared_mime or "").strip().lower()
    if normalized_declared and normalized_declared != detected:
        # Fail closed on MIME spoofing; never correct the declared type.
        return ImageCheck(ok=False, reason=REASON_MIME_MISMATCH, mime=detected, size=len(data))
    return ImageCheck(ok=True, mime=detected, size=len(data), data=data)


def decode_image_or_400(encoded: str, declared_mime: str | None) -> tuple[bytes, str]:
    check = validate_base64_image(encoded, declared_mime)
    if not check.ok:
        logger.info("image rejected reason=%s size=%s declared=%s", check.reason, check.size, declared_mime)
        raise ValidationError(f"{_REASON_MESSAGES[check.reason]} ({check.reason})", reason=check.reason)
    return check.data, check.mime


def encode_image(data: bytes | None) -> str | None:
    if data is None:
        return None
    return base64.b64encode(data).decode("ascii")
