"""Helpers imported by generated metadata route modules at request time."""

from __future__ import annotations

import hashlib
import importlib.machinery
import importlib.util
import re
import sys
import threading
from collections.abc import Mapping
from pathlib import Path
from types import ModuleType
from typing import Any
from urllib.parse import quote

METADATA_ID_PARAM = "__metadata_id__"
METADATA_IMAGE_META_TAG = "metadata-image-meta"

_OPTIONAL_CATCH_ALL = re.compile(r"^\[\[\.\.\.([^\]]+)\]\]$")
_CATCH_ALL = re.compile(r"^\[\.\.\.([^\]]+)\]$")
_DYNAMIC = re.compile(r"^\[([^\]]+)\]$")

_loaded_modules: dict[tuple[str, str], ModuleType] = {}
_load_lock = threading.RLock()


def fill_metadata_segment(segment: str, params: Mapping[str, Any], image_segment: str) -> str:
    """Turn a route segment template and its params into the URL of an image route.

    Route groups ``(name)`` and parallel slots ``@name`` do not appear in URLs and
    are dropped. ``[name]`` is replaced by its param, ``[...name]`` and
    ``[[...name]]`` by their list values joined with ``/``; a missing optional
    catch-all disappears, a missing required param is left as written.
    """

    parts: list[str] = []
    for part in segment.split("/"):
        if not part or (part.startswith("(") and part.endswith(")")) or part.startswith("@"):
            continue

        optional = _OPTIONAL_CATCH_ALL.match(part)
        catch_all = optional or _CATCH_ALL.match(part)
        if catch_all:
            value = params.get(catch_all.group(1))
            if value is None or value == [] or value == "":
                if optional is None:
                    parts.append(part)
                continue
            values = value if isinstance(value, (list, tuple)) else [value]
            parts.extend(quote(str(item), safe="") for item in values)
            continue

        dynamic = _DYNAMIC.match(part)
        if dynamic and params.get(dynamic.group(1)) is not None:
            parts.append(quote(str(params[dynamic.group(1)]), safe=""))
        else:
            parts.append(part)

    parts.append(image_segment)
    return "/" + "/".join(parts)


def load_image_module(path: str | Path, tag: str = METADATA_IMAGE_META_TAG) -> ModuleType:
    """Load a source file as a module whose identity is private to ``tag``.

    The module is registered under a name derived from the tag and the file's
    resolved path, so it is never the same object a plain import of the file
    would produce. Repeated calls with the same path and tag share one module.
    """

    resolved = Path(path).resolve()
    key = (str(resolved), tag)
    with _load_lock:
        module = _loaded_modules.get(key)
        if module is not None:
            return module

        digest = hashlib.sha1(str(resolved).encode("utf-8")).hexdigest()[:12]
        slug = re.sub(r"\W", "_", f"{tag}_{resolved.stem}")
        name = f"_metaimage_{slug}_{digest}"

        loader = importlib.machinery.SourceFileLoader(name, str(resolved))
        spec = importlib.util.spec_from_loader(name, loader)
        if spec is None:  # pragma: no cover - SourceFileLoader always yields a spec
            raise ImportError(f"Cannot load {resolved}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            loader.exec_module(module)
        except BaseException:
            sys.modules.pop(name, None)
            raise
        _loaded_modules[key] = module
        return module


__all__ = [
    "METADATA_ID_PARAM",
    "METADATA_IMAGE_META_TAG",
    "fill_metadata_segment",
    "load_image_module",
]
