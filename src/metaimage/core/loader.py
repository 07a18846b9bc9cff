"""Entry point turning one metadata image asset into route module source."""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from metaimage.config.loader import LoaderSettings, normalize_base_path, normalize_extension
from metaimage.core.classifier import MetadataCategory, classify_asset
from metaimage.core.dynamic import build_dynamic_module
from metaimage.core.naming import resolve_naming
from metaimage.core.static import build_static_module

logger = logging.getLogger(__name__)


class LoaderOptions(BaseModel):
    """Options for a single invocation."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    segment: str = "/"
    type: MetadataCategory
    page_extensions: tuple[str, ...] = Field(default=("py",), alias="pageExtensions")
    base_path: str = Field(default="", alias="basePath")
    root_context: Path | None = None

    @field_validator("page_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> tuple[str, ...]:
        if isinstance(value, str):
            value = [value]
        return tuple(normalize_extension(item) for item in value)

    @field_validator("base_path", mode="before")
    @classmethod
    def _normalize_base_path(cls, value: Any) -> str:
        if value is None:
            return ""
        return normalize_base_path(value)

    @classmethod
    def from_settings(
        cls,
        settings: LoaderSettings,
        *,
        segment: str,
        type: MetadataCategory | str,
        root_context: Path | None = None,
    ) -> LoaderOptions:
        """Build options for one asset from configured loader defaults."""

        return cls(
            segment=segment,
            type=type,
            page_extensions=tuple(settings.page_extensions),
            base_path=settings.base_path,
            root_context=root_context,
        )

    @property
    def pathname_prefix(self) -> str:
        return join_pathname(self.base_path, self.segment)


def join_pathname(*parts: str) -> str:
    """Join URL path parts into an absolute, normalized pathname."""

    pieces = [part.strip("/") for part in parts if part and part.strip("/")]
    return posixpath.normpath("/" + "/".join(pieces))


async def generate_metadata_image_module(
    resource_path: str | Path,
    content: bytes,
    options: LoaderOptions,
) -> str:
    """Return the source of the route module for one metadata image asset.

    Static images are probed and described once at build time; dynamic sources
    get a wrapper that asks the source for its variants at request time. Errors
    propagate and no source is produced for the failed asset.
    """

    asset = classify_asset(
        resource_path,
        category=options.type,
        page_extensions=options.page_extensions,
    )
    naming = resolve_naming(asset, content, root_context=options.root_context)
    logger.debug(
        "Generating %s %s module for %s (segment=%s)",
        "dynamic" if asset.is_dynamic else "static",
        asset.category.value,
        asset.resource_path,
        naming.path_segment,
    )

    if asset.is_dynamic:
        source = await build_dynamic_module(
            asset, naming, pathname_prefix=options.pathname_prefix
        )
    else:
        source = await build_static_module(
            asset, naming, content, pathname_prefix=options.pathname_prefix
        )

    logger.info("Generated metadata route for %s", asset.resource_path)
    return source
