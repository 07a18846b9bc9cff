"""Helpers shared by the test modules."""

from __future__ import annotations

import io
from typing import Any

from PIL import Image


def encode_image(width: int, height: int, image_format: str = "PNG") -> bytes:
    if image_format in {"PNG", "ICO"}:
        mode, color = "RGBA", (200, 40, 90, 255)
    else:
        mode, color = "RGB", (200, 40, 90)
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=image_format)
    return buffer.getvalue()


def load_generated(source: str) -> dict[str, Any]:
    """Execute generated module source and return its namespace."""

    namespace: dict[str, Any] = {"__name__": "generated_route"}
    exec(compile(source, "<generated>", "exec"), namespace)
    return namespace
