from __future__ import annotations

import base64
import binascii
import io

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..core.exceptions import ValidationError


def decode_data_url(value: str) -> bytes:
    """Accept `data:image/...;base64,<payload>` or a bare base64 payload."""
    if not value:
        raise ValidationError("Image payload is empty")
    payload = value.split(",", 1)[1] if value.startswith("data:") else value
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Image payload is not valid base64")


def decode_image(data: bytes) -> np.ndarray:
    """Decode image bytes into an RGB uint8 array."""
    try:
        img = Image.open(io.BytesIO(data)).convert("RGB")
    except (UnidentifiedImageError, OSError):
        raise ValidationError("Unsupported or corrupted image")
    return np.ascontiguousarray(np.asarray(img), dtype=np.uint8)
