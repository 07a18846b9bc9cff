"""Structured generation of route module source.

Templates are ordinary Python source parsed with :mod:`ast`. A placeholder is a
bare name spelled ``__NAME__``; rendering swaps each one for a literal node (or
a prepared node) and unparses the tree, so values never reach the output as raw
text.
"""

from __future__ import annotations

import ast
import keyword
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Union

_PLACEHOLDER = re.compile(r"^__[A-Z][A-Z0-9_]*__$")

Replacement = Union[ast.expr, Sequence[ast.stmt], Any]


def literal(value: Any) -> ast.expr:
    """Build an AST literal for a JSON-like value.

    Only None, bools, numbers, strings, lists/tuples and dicts with string keys
    are accepted; anything else raises TypeError.
    """

    if value is None or isinstance(value, (bool, str)):
        return ast.Constant(value=value)
    if isinstance(value, (int, float)):
        if value != value or value in (float("inf"), float("-inf")):
            raise TypeError(f"Cannot embed non-finite number {value!r} in generated source")
        return ast.Constant(value=value)
    if isinstance(value, (list, tuple)):
        return ast.List(elts=[literal(item) for item in value], ctx=ast.Load())
    if isinstance(value, Mapping):
        keys: list[ast.expr | None] = []
        values: list[ast.expr] = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"Dictionary keys must be strings, got {type(key).__name__}")
            keys.append(ast.Constant(value=key))
            values.append(literal(item))
        return ast.Dict(keys=keys, values=values)
    raise TypeError(f"Cannot embed {type(value).__name__} value in generated source")


def validate_identifier(name: str) -> str:
    if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
        raise ValueError(f"{name!r} is not a valid Python identifier")
    return name


def attribute_mapping(source: str, names: Iterable[str]) -> ast.Dict:
    """Build ``{"name": source.name, ...}`` for validated names."""

    validate_identifier(source)
    keys: list[ast.expr | None] = []
    values: list[ast.expr] = []
    for name in names:
        validate_identifier(name)
        keys.append(ast.Constant(value=name))
        values.append(
            ast.Attribute(value=ast.Name(id=source, ctx=ast.Load()), attr=name, ctx=ast.Load())
        )
    return ast.Dict(keys=keys, values=values)


def statements(source: str) -> list[ast.stmt]:
    """Parse a fixed code fragment into statements for a statement placeholder."""

    return ast.parse(source).body


class _PlaceholderTransformer(ast.NodeTransformer):
    def __init__(self, replacements: Mapping[str, Replacement]) -> None:
        self._replacements = replacements
        self.used: set[str] = set()
        self.unknown: set[str] = set()

    def visit_Expr(self, node: ast.Expr) -> Any:
        target = node.value
        if isinstance(target, ast.Name) and target.id in self._replacements:
            replacement = self._replacements[target.id]
            if _is_statement_list(replacement):
                self.used.add(target.id)
                expanded: list[ast.stmt] = []
                for stmt in replacement:
                    visited = self.visit(stmt)
                    expanded.extend(visited if isinstance(visited, list) else [visited])
                return expanded
        return self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> Any:
        if not _PLACEHOLDER.match(node.id):
            return node
        if node.id not in self._replacements:
            self.unknown.add(node.id)
            return node
        replacement = self._replacements[node.id]
        if _is_statement_list(replacement):
            raise ValueError(f"Placeholder {node.id} expects an expression, got statements")
        self.used.add(node.id)
        if isinstance(replacement, ast.expr):
            return replacement
        return literal(replacement)


def render_module(template: str, values: Mapping[str, Replacement]) -> str:
    """Render a template by replacing every placeholder.

    Raises ValueError when the template references a placeholder that has no
    value or a value is never used.
    """

    tree = ast.parse(template)
    transformer = _PlaceholderTransformer(values)
    tree = transformer.visit(tree)

    if transformer.unknown:
        raise ValueError(f"No value for placeholder(s): {', '.join(sorted(transformer.unknown))}")
    unused = set(values) - transformer.used
    if unused:
        raise ValueError(f"Unused placeholder value(s): {', '.join(sorted(unused))}")

    ast.fix_missing_locations(tree)
    return ast.unparse(tree) + "\n"


def _is_statement_list(value: Any) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(v, ast.stmt) for v in value)
