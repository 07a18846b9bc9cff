"""Classification of metadata image assets."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

_EXTENSION_ALIASES = {"jpg": "jpeg"}


class MetadataCategory(str, Enum):
    """Metadata image conventions understood by the loader."""

    ICON = "icon"
    APPLE_ICON = "appleIcon"
    OPEN_GRAPH = "openGraph"
    TWITTER = "twitter"
    FAVICON = "favicon"

    @property
    def numeric_sizes(self) -> bool:
        """Social cards describe themselves with width/height instead of `sizes`."""

        return self in (MetadataCategory.OPEN_GRAPH, MetadataCategory.TWITTER)

    @property
    def hashed(self) -> bool:
        return self is not MetadataCategory.FAVICON


@dataclass(frozen=True, slots=True)
class AssetDescriptor:
    """Facts about one asset, derived from its path alone."""

    resource_path: Path
    file_name_base: str
    extension: str
    category: MetadataCategory
    is_dynamic: bool


def classify_asset(
    resource_path: str | Path,
    *,
    category: MetadataCategory | str,
    page_extensions: Iterable[str],
) -> AssetDescriptor:
    """Describe an asset as either a static image or a dynamic source module.

    Any extension is accepted here; unsupported image formats only surface when
    their dimensions are probed.
    """

    path = Path(resource_path)
    extension = path.suffix[1:]
    extension = _EXTENSION_ALIASES.get(extension, extension)
    dynamic_extensions = {item.lstrip(".").lower() for item in page_extensions}

    return AssetDescriptor(
        resource_path=path,
        file_name_base=path.stem,
        extension=extension,
        category=MetadataCategory(category),
        is_dynamic=extension.lower() in dynamic_extensions,
    )
