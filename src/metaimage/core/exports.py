"""Static discovery of the names a dynamic image source exports."""

from __future__ import annotations

import ast
import asyncio
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_EXPORT = "default"


async def collect_exported_names(resource_path: str | Path) -> tuple[str, ...]:
    """Read a source module and return its exported names, excluding ``default``.

    The module is parsed, never executed. Read and syntax errors propagate.
    """

    path = Path(resource_path)
    loop = asyncio.get_running_loop()
    source = await loop.run_in_executor(None, path.read_text, "utf-8")
    names = exported_names(source, filename=str(path))
    logger.debug("Exports of %s: %s", path, ", ".join(names) or "(none)")
    return names


def exported_names(source: str, *, filename: str = "<unknown>") -> tuple[str, ...]:
    """Return exported top-level names in source order.

    A literal ``__all__`` wins when present. Otherwise every public top-level
    binding counts: functions, classes and assignments, plus imports written in
    the explicit re-export form ``from x import name as name``.
    """

    tree = ast.parse(source, filename=filename)
    declared = _declared_all(tree.body)
    candidates = declared if declared is not None else _public_bindings(tree.body)

    seen: dict[str, None] = {}
    for name in candidates:
        if name == DEFAULT_EXPORT or name in seen:
            continue
        seen[name] = None
    return tuple(seen)


def _declared_all(body: list[ast.stmt]) -> list[str] | None:
    declared: list[str] | None = None
    for node in body:
        value: ast.expr | None = None
        extend = False
        if isinstance(node, ast.Assign) and any(_is_all(target) for target in node.targets):
            value = node.value
        elif isinstance(node, ast.AnnAssign) and _is_all(node.target):
            value = node.value
        elif isinstance(node, ast.AugAssign) and _is_all(node.target):
            value, extend = node.value, True
        if value is None:
            continue
        try:
            items = ast.literal_eval(value)
        except (ValueError, TypeError):
            # computed __all__, fall back to bindings
            return None
        if not isinstance(items, (list, tuple)) or not all(isinstance(i, str) for i in items):
            return None
        declared = (declared or []) + list(items) if extend else list(items)
    return declared


def _is_all(target: ast.expr) -> bool:
    return isinstance(target, ast.Name) and target.id == "__all__"


def _public_bindings(body: Iterable[ast.stmt]) -> Iterator[str]:
    for name in _bindings(body):
        if not name.startswith("_"):
            yield name


def _bindings(body: Iterable[ast.stmt]) -> Iterator[str]:
    for node in body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            yield node.name
        elif isinstance(node, ast.Assign):
            for target in node.targets:
                yield from _target_names(target)
        elif isinstance(node, ast.AnnAssign):
            if node.value is not None:
                yield from _target_names(node.target)
        elif isinstance(node, ast.ImportFrom):
            for alias in node.names:
                if alias.asname is not None and alias.asname == alias.name:
                    yield alias.asname
        elif isinstance(node, ast.If):
            yield from _bindings(node.body)
            yield from _bindings(node.orelse)
        elif isinstance(node, ast.Try):
            yield from _bindings(node.body)
            for handler in node.handlers:
                yield from _bindings(handler.body)
            yield from _bindings(node.orelse)
            yield from _bindings(node.finalbody)


def _target_names(target: ast.expr) -> Iterator[str]:
    if isinstance(target, ast.Name):
        yield target.id
    elif isinstance(target, (ast.Tuple, ast.List)):
        for element in target.elts:
            yield from _target_names(element)
    elif isinstance(target, ast.Starred):
        yield from _target_names(target.value)
