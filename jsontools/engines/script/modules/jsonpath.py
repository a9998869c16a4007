"""
JSONPath module for the script engine and the query/nodes operations: query, nodes, paths, value, stringify.

Backed by jsonpath-ng's extended parser (filters, arithmetic). Match locations are
reported as component lists rooted at "$", e.g. ["$", "a", 0].
"""

from types import SimpleNamespace
from typing import Any

from jsonpath_ng.ext import parse
from jsonpath_ng.jsonpath import Child, DatumInContext, Fields, Index, JSONPath

from jsontools.core.errors import InvalidPathExpressionError


def compile_path(expression: str) -> JSONPath:
    """Parse a JSONPath expression. Raises InvalidPathExpressionError."""
    if not isinstance(expression, str) or not expression.strip():
        raise InvalidPathExpressionError("JSONPath expression must be a non-empty string")
    try:
        return parse(expression)
    except Exception as e:
        raise InvalidPathExpressionError(
            f"Invalid JSONPath expression {expression!r}: {e}"
        ) from e


def _find(data: Any, expression: str, count: int | None) -> list[DatumInContext]:
    matches = compile_path(expression).find(data)
    if count is not None and count > 0:
        matches = matches[:count]
    return matches


def _step_parts(path: JSONPath, parent: DatumInContext | None) -> list[Any]:
    if isinstance(path, Child):
        return _step_parts(path.left, parent) + _step_parts(path.right, parent)
    if isinstance(path, Fields):
        return [path.fields[0]] if path.fields else []
    if isinstance(path, Index):
        indices = getattr(path, "indices", None)
        i = indices[0] if indices else path.index
        if i < 0 and parent is not None and isinstance(parent.value, list):
            i += len(parent.value)
        return [i]
    # Root / This
    return []


def path_components(match: DatumInContext) -> list[Any]:
    """Walk a match's context chain back to the root: ["$", key-or-index, ...]."""
    reversed_parts: list[Any] = []
    datum: DatumInContext | None = match
    while datum is not None:
        reversed_parts.extend(reversed(_step_parts(datum.path, datum.context)))
        datum = datum.context
    reversed_parts.append("$")
    return list(reversed(reversed_parts))


def query(data: Any, expression: str, count: int | None = None) -> list[Any]:
    """Values matching expression, in document order; at most count when count > 0."""
    return [m.value for m in _find(data, expression, count)]


def paths(data: Any, expression: str, count: int | None = None) -> list[list[Any]]:
    return [path_components(m) for m in _find(data, expression, count)]


def nodes(data: Any, expression: str, count: int | None = None) -> list[dict[str, Any]]:
    """Matches as [{"path": [...], "value": ...}]."""
    return [
        {"path": path_components(m), "value": m.value}
        for m in _find(data, expression, count)
    ]


def value(data: Any, expression: str) -> Any:
    """First matching value, or None."""
    matches = _find(data, expression, 1)
    return matches[0].value if matches else None


def stringify(components: list[Any]) -> str:
    """["$", "a", 0, "b c"] -> "$.a[0]['b c']"."""
    out = "$"
    for i, part in enumerate(components):
        if i == 0 and part == "$":
            continue
        if isinstance(part, int) and not isinstance(part, bool):
            out += f"[{part}]"
        elif isinstance(part, str) and part.isidentifier():
            out += f".{part}"
        else:
            escaped = str(part).replace("\\", "\\\\").replace("'", "\\'")
            out += f"['{escaped}']"
    return out


def make_jsonpath_module() -> Any:
    """Build the `jp` object exposed to scripts."""
    return SimpleNamespace(
        query=query,
        nodes=nodes,
        paths=paths,
        value=value,
        stringify=stringify,
    )
