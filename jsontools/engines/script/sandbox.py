"""
RestrictedPython sandbox for script execution.

Globals are built from an allow-list on every run: safe builtins, the guard
functions RestrictedPython's rewritten code calls, and the context bindings
(data, py_, jp). Ambient capabilities in DENIED_NAMES are then bound to None,
so a script sees them as unusable even if a binding tried to supply one.

A trailing expression statement becomes the script's value (assigned to
RESULT_NAME); scripts may also assign RESULT_NAME themselves.
"""

import ast
import builtins
import operator
from typing import Any

from RestrictedPython import compile_restricted
from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    guarded_unpack_sequence,
    safe_builtins,
    safer_getattr,
)

RESULT_NAME = "result"

# Process control, filesystem, module loading, network, timers, binary buffers, reflection.
DENIED_NAMES: tuple[str, ...] = (
    "open",
    "exec",
    "eval",
    "compile",
    "input",
    "breakpoint",
    "help",
    "exit",
    "quit",
    "globals",
    "locals",
    "vars",
    "dir",
    "memoryview",
    "bytearray",
    "os",
    "sys",
    "subprocess",
    "shutil",
    "pathlib",
    "io",
    "importlib",
    "builtins",
    "inspect",
    "gc",
    "ctypes",
    "socket",
    "urllib",
    "http",
    "requests",
    "httpx",
    "threading",
    "multiprocessing",
    "asyncio",
    "signal",
    "time",
    "sched",
)

# Container and iteration helpers not in RestrictedPython's safe_builtins.
_EXTRA_BUILTINS = (
    "dict",
    "list",
    "set",
    "frozenset",
    "enumerate",
    "map",
    "filter",
    "reversed",
    "any",
    "all",
    "min",
    "max",
    "sum",
)

_INPLACE_OPS = {
    "+=": operator.iadd,
    "-=": operator.isub,
    "*=": operator.imul,
    "/=": operator.itruediv,
    "//=": operator.ifloordiv,
    "%=": operator.imod,
    "**=": operator.ipow,
    "|=": operator.ior,
    "&=": operator.iand,
    "^=": operator.ixor,
}


def _inplacevar(op: str, x: Any, y: Any) -> Any:
    fn = _INPLACE_OPS.get(op)
    if fn is None:
        raise SyntaxError(f"Augmented assignment {op} is not allowed")
    return fn(x, y)


def _apply(fn: Any, *args: Any, **kwargs: Any) -> Any:
    return fn(*args, **kwargs)


def _make_safe_builtins() -> dict[str, Any]:
    safe = dict(safe_builtins)
    for name in _EXTRA_BUILTINS:
        safe.setdefault(name, getattr(builtins, name))
    for name in DENIED_NAMES:
        safe.pop(name, None)
    return safe


def _make_guard_globals() -> dict[str, Any]:
    """Guards required by RestrictedPython's rewritten bytecode."""
    return {
        "_getattr_": safer_getattr,
        "_getiter_": default_guarded_getiter,
        "_getitem_": default_guarded_getitem,
        "_iter_unpack_sequence_": guarded_iter_unpack_sequence,
        "_unpack_sequence_": guarded_unpack_sequence,
        "_write_": full_write_guard,
        "_inplacevar_": _inplacevar,
        "_apply_": _apply,
    }


def capture_final_expression(source: str, filename: str = "<script>") -> str:
    """
    Rewrite a trailing expression statement into `result = <expr>`.

    Raises SyntaxError when source does not parse.
    """
    tree = ast.parse(source, filename, "exec")
    if tree.body and isinstance(tree.body[-1], ast.Expr):
        last = tree.body[-1]
        assign = ast.Assign(
            targets=[ast.Name(id=RESULT_NAME, ctx=ast.Store())],
            value=last.value,
        )
        tree.body[-1] = ast.copy_location(assign, last)
        ast.fix_missing_locations(tree)
        return ast.unparse(tree)
    return source


def compile_script(script: str, filename: str = "<script>") -> Any:
    """
    Compile script with RestrictedPython. Raises SyntaxError on failure,
    including policy violations (underscore names, disallowed statements).

    Returns a code object suitable for exec(bytecode, globals).
    """
    code = compile_restricted(capture_final_expression(script, filename), filename, "exec")
    if code is None:
        raise SyntaxError("RestrictedPython: compile failed")
    return code


def build_restricted_globals(context_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Build a fresh globals dict for exec(compiled, globals): safe builtins,
    guards, context bindings, then DENIED_NAMES bound to None.
    """
    g: dict[str, Any] = {
        "__builtins__": _make_safe_builtins(),
        "__name__": "script",
    }
    g.update(_make_guard_globals())
    g.update(context_dict)
    for name in DENIED_NAMES:
        g[name] = None
    return g
