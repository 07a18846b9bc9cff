"""MIME types for image extensions."""

from __future__ import annotations

IMAGE_EXT_MIME_TYPES: dict[str, str] = {
    "ico": "image/x-icon",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "avif": "image/avif",
    "webp": "image/webp",
}


def mime_type_for(extension: str) -> str | None:
    """Return the MIME type for an extension, or None when it is not an image we know."""

    return IMAGE_EXT_MIME_TYPES.get(extension.lstrip(".").lower())
