import base64
import binascii
import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .exceptions import PayloadTooLarge, ValidationError

DATA_URL_MARKER = "base64,"


def clean_base64_image(value: Optional[str], field: str, max_bytes: int) -> Optional[str]:
    """Validate a base64 image payload and return it without any data URL prefix.

    Empty input returns None. The size check runs on the encoded length first
    so oversized payloads are rejected before they are decoded.
    """
    data = str(value or "").strip()
    if not data:
        return None
    idx = data.find(DATA_URL_MARKER)
    if idx != -1:
        data = data[idx + len(DATA_URL_MARKER):].strip()
    data = "".join(data.split())
    if not data:
        return None

    if len(data) * 3 // 4 > max_bytes + 2:
        raise PayloadTooLarge(f"{field} too large (compress more before upload)")

    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(f"{field} is not valid base64")
    if len(raw) > max_bytes:
        raise PayloadTooLarge(f"{field} too large (compress more before upload)")

    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        raise ValidationError(f"{field} is not a valid image")
    return data
