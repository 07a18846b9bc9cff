"""Metaimage: route modules for icons, favicons and social card images."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from importlib import import_module, metadata
from pathlib import Path
from typing import Any

# Loaded on first access so generated modules importing ``metaimage.runtime``
# do not pull in Pillow and pydantic.
_LAZY_EXPORTS = {
    "InvalidImageFormatError": "metaimage.core.probe",
    "LoaderOptions": "metaimage.core.loader",
    "MetadataCategory": "metaimage.core.classifier",
    "generate_metadata_image_module": "metaimage.core.loader",
}


def _find_pyproject(start: Path) -> Path | None:
    for candidate in (start, *start.parents):
        path = candidate / "pyproject.toml"
        if path.is_file():
            return path
    return None


def _read_version_from_pyproject(pyproject: Path) -> str | None:
    try:
        with pyproject.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):  # pragma: no cover - filesystem errors
        return None

    project = data.get("project")
    if not isinstance(project, dict) or project.get("name") != "metaimage":
        return None

    version = project.get("version")
    if not isinstance(version, str) or not version.strip():
        return None
    return version.strip()


@lru_cache(maxsize=1)
def get_version() -> str:
    """Return the Metaimage version.

    A source checkout reads `[project].version` from `pyproject.toml`; an installed
    package falls back to its distribution metadata.
    """

    pyproject = _find_pyproject(Path(__file__).resolve().parent)
    if pyproject is not None:
        version = _read_version_from_pyproject(pyproject)
        if version is not None:
            return version

    try:
        return metadata.version("metaimage")
    except metadata.PackageNotFoundError as exc:  # pragma: no cover - occurs in dev
        raise RuntimeError("Unable to determine Metaimage version.") from exc


def __getattr__(name: str) -> Any:
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return getattr(import_module(module_name), name)


__all__ = ["get_version", *_LAZY_EXPORTS]
