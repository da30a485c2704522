"""
Screenshot encoding — uploaded image bytes to the base64 payload the model gets.
"""

import base64
from typing import Optional

from shopaudit.config import MAX_SCREENSHOT_BYTES
from shopaudit.models import Screenshot

ALLOWED_MIME_TYPES = ("image/png", "image/jpeg", "image/webp", "image/gif")


def encode_screenshot(data: bytes, mime_type: Optional[str] = None,
                      max_bytes: int = MAX_SCREENSHOT_BYTES) -> Screenshot:
    """
    Base64-encode an uploaded screenshot.

    Raises:
        ValueError: empty upload, too large, or not an image type we can send.
    """
    if not data:
        raise ValueError("Screenshot is empty")
    if len(data) > max_bytes:
        raise ValueError(
            f"Screenshot is {len(data) / 1024 / 1024:.1f} MB; "
            f"the limit is {max_bytes / 1024 / 1024:.1f} MB"
        )

    mime_type = mime_type or "image/png"
    if mime_type == "image/jpg":
        mime_type = "image/jpeg"
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ValueError(f"Unsupported screenshot type: {mime_type}")

    return Screenshot(data=base64.b64encode(data).decode("ascii"), mime_type=mime_type)
