"""Photo encoding helpers."""

import base64
import hashlib

DEFAULT_MIME_TYPE = "image/jpeg"


def to_data_uri(data: bytes, mime_type: str | None = None) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or DEFAULT_MIME_TYPE};base64,{encoded}"


def image_hash(data: bytes) -> str:
    """SHA-256 hex digest of the raw photo, used to spot re-submitted images."""
    return hashlib.sha256(data).hexdigest()
