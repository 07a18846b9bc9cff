"""Deterministic naming for generated metadata routes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path

from metaimage.core.classifier import AssetDescriptor

DEFAULT_HASH_LENGTH = 16

_PLACEHOLDER = re.compile(r"\[(name|ext|path|contenthash|hash)(?::(\d+))?\]")


@dataclass(frozen=True, slots=True)
class NamingInfo:
    """Names used to build the URL of one asset."""

    content_hash: str
    interpolated_name: str
    path_segment: str
    hash_query: str


def content_digest(content: bytes, length: int = DEFAULT_HASH_LENGTH) -> str:
    """Return the truncated hex digest used for cache busting."""

    return sha256(content).hexdigest()[:length]


def interpolate_name(
    resource_path: str | Path,
    template: str,
    content: bytes,
    *,
    context: str | Path | None = None,
) -> str:
    """Fill a filename template from a resource path and its bytes.

    Supported placeholders are ``[name]``, ``[ext]``, ``[path]``, ``[contenthash]``
    and ``[hash]``; the hash placeholders take an optional length, as in
    ``[contenthash:8]``. Unknown placeholders are left untouched.
    """

    path = Path(resource_path)

    def _replace(match: re.Match[str]) -> str:
        key, length = match.group(1), match.group(2)
        if key == "name":
            return path.stem
        if key == "ext":
            return path.suffix[1:]
        if key == "path":
            return _relative_directory(path, context)
        return content_digest(content, int(length) if length else DEFAULT_HASH_LENGTH)

    return _PLACEHOLDER.sub(_replace, template)


def resolve_naming(
    asset: AssetDescriptor,
    content: bytes,
    *,
    root_context: str | Path | None = None,
) -> NamingInfo:
    """Compute hash, interpolated filename and URL segment for an asset.

    Favicons are served from a fixed URL and dynamic images are rendered per
    request, so neither gets a content hash.
    """

    content_hash = ""
    if asset.category.hashed and not asset.is_dynamic:
        content_hash = interpolate_name(
            asset.resource_path, "[contenthash]", content, context=root_context
        )
    interpolated_name = interpolate_name(
        asset.resource_path, "[name].[ext]", content, context=root_context
    )

    return NamingInfo(
        content_hash=content_hash,
        interpolated_name=interpolated_name,
        path_segment=asset.file_name_base if asset.is_dynamic else interpolated_name,
        hash_query=f"?{content_hash}" if content_hash else "",
    )


def _relative_directory(path: Path, context: str | Path | None) -> str:
    if context is None:
        return ""
    try:
        relative = path.parent.relative_to(Path(context))
    except ValueError:
        relative = path.parent
    text = relative.as_posix()
    return "" if text in ("", ".") else f"{text}/"
