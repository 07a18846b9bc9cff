"""Discovery of conventional metadata image files in an app directory."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from metaimage.core.classifier import MetadataCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Convention:
    category: MetadataCategory
    stem: re.Pattern[str]
    extensions: frozenset[str]
    allows_dynamic: bool = True
    root_only: bool = False


CONVENTIONS: tuple[Convention, ...] = (
    Convention(
        MetadataCategory.FAVICON,
        re.compile(r"^favicon$"),
        frozenset({"ico"}),
        allows_dynamic=False,
        root_only=True,
    ),
    Convention(
        MetadataCategory.ICON,
        re.compile(r"^icon\d*$"),
        frozenset({"ico", "jpg", "jpeg", "png", "svg"}),
    ),
    Convention(
        MetadataCategory.APPLE_ICON,
        re.compile(r"^apple-icon\d*$"),
        frozenset({"jpg", "jpeg", "png"}),
    ),
    Convention(
        MetadataCategory.OPEN_GRAPH,
        re.compile(r"^opengraph-image\d*$"),
        frozenset({"jpg", "jpeg", "png", "gif"}),
    ),
    Convention(
        MetadataCategory.TWITTER,
        re.compile(r"^twitter-image\d*$"),
        frozenset({"jpg", "jpeg", "png", "gif"}),
    ),
)


@dataclass(frozen=True, slots=True)
class DiscoveredAsset:
    """A metadata image found below the app directory."""

    path: Path
    category: MetadataCategory
    segment: str
    is_dynamic: bool


def match_convention(
    path: Path,
    *,
    page_extensions: Iterable[str],
    at_root: bool,
) -> tuple[MetadataCategory, bool] | None:
    """Return ``(category, is_dynamic)`` when the file name follows a convention."""

    extension = path.suffix[1:].lower()
    dynamic = extension in {item.lstrip(".").lower() for item in page_extensions}
    for convention in CONVENTIONS:
        if convention.root_only and not at_root:
            continue
        if not convention.stem.match(path.stem):
            continue
        if dynamic and convention.allows_dynamic:
            return convention.category, True
        if extension in convention.extensions:
            return convention.category, False
    return None


def discover_metadata_assets(
    app_dir: Path,
    *,
    page_extensions: Iterable[str],
) -> list[DiscoveredAsset]:
    """Walk ``app_dir`` and collect every conventional metadata image, sorted by path."""

    extensions = tuple(page_extensions)
    root = app_dir.resolve()
    if not root.is_dir():
        raise NotADirectoryError(f"App directory not found: {app_dir}")

    found: list[DiscoveredAsset] = []
    for path in sorted(root.rglob("*")):
        if not path.is_file() or any(part.startswith(".") for part in path.relative_to(root).parts):
            continue
        directory = path.parent.relative_to(root)
        match = match_convention(path, page_extensions=extensions, at_root=directory == Path("."))
        if match is None:
            continue
        category, is_dynamic = match
        segment = "/" + directory.as_posix() if directory != Path(".") else "/"
        found.append(DiscoveredAsset(path=path, category=category, segment=segment, is_dynamic=is_dynamic))

    logger.info("Discovered %s metadata image(s) under %s", len(found), root)
    return found
