"""Image dimension probing."""

from __future__ import annotations

import io
import re
from dataclasses import dataclass
from pathlib import Path

from bs4 import BeautifulSoup
from PIL import Image, UnidentifiedImageError

_SVG_LENGTH = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*(px)?\s*$")


class InvalidImageFormatError(ValueError):
    """Raised when an asset's bytes cannot be read as an image."""

    def __init__(self, message: str, *, resource_path: Path | None = None) -> None:
        super().__init__(message)
        self.resource_path = resource_path


@dataclass(frozen=True, slots=True)
class ImageSize:
    width: int
    height: int


def get_image_size(content: bytes, extension: str) -> ImageSize:
    """Return pixel dimensions of an encoded image.

    Raster formats are read through Pillow, which only decodes the header.
    SVG documents are sized from their root ``width``/``height`` attributes,
    falling back to the ``viewBox``.
    """

    if extension.lower() == "svg":
        return _svg_size(content)

    try:
        with Image.open(io.BytesIO(content)) as image:
            width, height = image.size
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise InvalidImageFormatError(f"Unable to read {extension!r} image: {exc}") from exc
    return ImageSize(width=width, height=height)


def _svg_size(content: bytes) -> ImageSize:
    try:
        markup = content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidImageFormatError("SVG document is not valid UTF-8") from exc

    root = BeautifulSoup(markup, "html.parser").find("svg")
    if root is None:
        raise InvalidImageFormatError("Document has no <svg> root element")

    width = _svg_length(root.get("width"))
    height = _svg_length(root.get("height"))
    if width is not None and height is not None:
        return ImageSize(width=width, height=height)

    # html.parser lower-cases attribute names
    view_box = root.get("viewbox") or root.get("viewBox")
    if view_box:
        parts = view_box.replace(",", " ").split()
        if len(parts) == 4:
            try:
                box_width, box_height = float(parts[2]), float(parts[3])
            except ValueError:
                pass
            else:
                return ImageSize(width=round(box_width), height=round(box_height))

    raise InvalidImageFormatError("SVG document declares no usable width/height or viewBox")


def _svg_length(value: str | None) -> int | None:
    if not value:
        return None
    match = _SVG_LENGTH.match(value)
    if match is None:
        return None
    return round(float(match.group(1)))
