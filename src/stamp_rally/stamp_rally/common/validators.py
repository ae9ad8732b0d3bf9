from __future__ import annotations

import os
from typing import Optional

from ..core.constants import ALLOWED_ICON_EXTENSIONS
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_icon_file(filename: Optional[str], mimetype: Optional[str]) -> str:
    """Validate an uploaded icon by extension and mimetype; returns the extension with its dot.

    Both the file extension and the declared mimetype must name an allowed
    image type (JPEG, PNG, GIF, SVG).
    """

    if not filename:
        raise ValidationError("No file selected")

    ext = os.path.splitext(filename)[1].lower()
    ext_ok = ext.lstrip(".") in ALLOWED_ICON_EXTENSIONS
    mime = (mimetype or "").lower()
    mime_ok = any(allowed in mime for allowed in ALLOWED_ICON_EXTENSIONS)

    if not (ext_ok and mime_ok):
        raise ValidationError("Only image files (JPEG, PNG, GIF, SVG) can be uploaded")
    return ext


def require_max_size(data: bytes, max_bytes: int) -> bytes:
    if len(data) > max_bytes:
        raise ValidationError(f"File exceeds {max_bytes // (1024 * 1024)} MB limit")
    return data
