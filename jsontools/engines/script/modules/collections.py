"""
Deep-utility module for the script engine: pydash exposed as `py_`.

pydash resolves paths and property iteratees with getattr on anything that is
not a dict or list, which would step around RestrictedPython's attribute
guard. Each function is therefore wrapped so that its path arguments are split
into segments and rejected when a segment is private (leading underscore) or
one of RestrictedPython's frame/generator/code attributes.

The object being operated on (the first positional argument) is not inspected,
so documents whose keys happen to start with underscores stay usable.
"""

import functools
import re
from types import SimpleNamespace
from typing import Any, Callable

import pydash
from RestrictedPython.transformer import INSPECT_ATTRIBUTES

_SEGMENT_SPLIT_RE = re.compile(r"[.\[\]]")

# Timers, the lazy chain wrapper (whose methods bypass the wrappers below) and
# getter factories that take the path only on the returned callable.
_EXCLUDED = frozenset(
    {"chain", "py_", "delay", "debounce", "throttle", "property_of", "method_of"}
)

# Iteratee factories whose first argument is already a path or a matcher.
_PATH_FIRST = frozenset(
    {"iteratee", "property_", "properties", "matches", "matches_property", "method", "conforms"}
)

# Pure text helpers never resolve paths; "_" is a common separator there.
_UNGUARDED_MODULE = "pydash.strings"


def _is_restricted_segment(segment: str) -> bool:
    if segment in INSPECT_ATTRIBUTES:
        return True
    return segment.startswith("_") and segment.strip("_") != ""


def _names_restricted(value: Any) -> bool:
    """True if a path-like argument reaches a private or inspection attribute."""
    if isinstance(value, str):
        return any(_is_restricted_segment(s) for s in _SEGMENT_SPLIT_RE.split(value))
    if isinstance(value, (list, tuple)):
        return any(_names_restricted(v) for v in value)
    if isinstance(value, dict):
        # matches / conforms style sources: keys are looked up on the target
        return any(
            _names_restricted(k) or (isinstance(v, dict) and _names_restricted(v))
            for k, v in value.items()
        )
    return False


def _guarded(name: str, fn: Callable[..., Any]) -> Callable[..., Any]:
    skip = 0 if name in _PATH_FIRST else 1

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if any(_names_restricted(a) for a in args[skip:]) or any(
            _names_restricted(v) for v in kwargs.values()
        ):
            raise ValueError(
                f"py_.{name}: paths to private attributes are not allowed"
            )
        return fn(*args, **kwargs)

    return wrapper


def make_collections_module() -> Any:
    """Build the `py_` object: every public pydash function, guarded."""
    names = getattr(pydash, "__all__", None) or dir(pydash)
    funcs: dict[str, Callable[..., Any]] = {}
    for name in names:
        if name.startswith("_") or name in _EXCLUDED:
            continue
        obj = getattr(pydash, name, None)
        if not callable(obj) or isinstance(obj, type):
            continue
        if getattr(obj, "__module__", "") == _UNGUARDED_MODULE:
            funcs[name] = obj
        else:
            funcs[name] = _guarded(name, obj)
    return SimpleNamespace(**funcs)
