"""Route modules for static metadata images."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from metaimage.core.classifier import AssetDescriptor, MetadataCategory
from metaimage.core.codegen import render_module
from metaimage.core.mime import mime_type_for
from metaimage.core.naming import NamingInfo
from metaimage.core.probe import ImageSize, InvalidImageFormatError, get_image_size

logger = logging.getLogger(__name__)

ALT_SUFFIX = ".alt.txt"

STATIC_TEMPLATE = """
from metaimage.runtime import fill_metadata_segment


def default(props):
    image_data = __IMAGE_DATA__
    image_url = fill_metadata_segment(__PATHNAME_PREFIX__, props["params"], __PAGE_SEGMENT__)
    return [{**image_data, "url": image_url + __HASH_QUERY__}]
"""


async def build_static_module(
    asset: AssetDescriptor,
    naming: NamingInfo,
    content: bytes,
    *,
    pathname_prefix: str,
) -> str:
    """Probe a static image and emit a module describing it."""

    loop = asyncio.get_running_loop()
    try:
        size = await loop.run_in_executor(None, get_image_size, content, asset.extension)
    except InvalidImageFormatError as exc:
        exc.resource_path = asset.resource_path
        raise
    except Exception as exc:
        raise InvalidImageFormatError(
            f"Unable to read image dimensions: {exc}", resource_path=asset.resource_path
        ) from exc

    image_data = static_image_data(asset, size)
    if asset.category.numeric_sizes:
        alt = await read_alt_text(asset.resource_path.with_name(asset.file_name_base + ALT_SUFFIX))
        if alt is not None:
            image_data["alt"] = alt

    return render_module(
        STATIC_TEMPLATE,
        {
            "__IMAGE_DATA__": image_data,
            "__PATHNAME_PREFIX__": pathname_prefix,
            "__PAGE_SEGMENT__": naming.path_segment,
            "__HASH_QUERY__": (
                "" if asset.category is MetadataCategory.FAVICON else naming.hash_query
            ),
        },
    )


def static_image_data(asset: AssetDescriptor, size: ImageSize) -> dict[str, Any]:
    """Describe the image without its URL."""

    data: dict[str, Any] = {}
    mime_type = mime_type_for(asset.extension)
    if mime_type is not None:
        data["type"] = mime_type
    if asset.category.numeric_sizes:
        data["width"] = size.width
        data["height"] = size.height
    elif asset.extension.lower() == "ico":
        data["sizes"] = "any"
    else:
        data["sizes"] = f"{size.width}x{size.height}"
    return data


async def read_alt_text(path: Path) -> str | None:
    """Return the verbatim contents of an alt-text sidecar, or None when there is none."""

    loop = asyncio.get_running_loop()
    if not await loop.run_in_executor(None, path.is_file):
        return None
    logger.debug("Reading alt text from %s", path)
    return await loop.run_in_executor(None, _read_verbatim, path)


def _read_verbatim(path: Path) -> str:
    # newline="" keeps line endings exactly as written
    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read()
