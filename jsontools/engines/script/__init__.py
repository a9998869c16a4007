"""
Script engine (Python, RestrictedPython).

Exports: ScriptExecutor, ScriptContext, compile_script, build_restricted_globals, decode_outcome.
"""

from .context import ScriptContext
from .executor import ScriptExecutor
from .outcome import (
    NO_VALUE,
    PlainValue,
    UpdateDirective,
    UpdateFile,
    UpdateMultipleFiles,
    decode_outcome,
    validate_directives,
)
from .sandbox import build_restricted_globals, compile_script

__all__ = [
    "NO_VALUE",
    "PlainValue",
    "ScriptContext",
    "ScriptExecutor",
    "UpdateDirective",
    "UpdateFile",
    "UpdateMultipleFiles",
    "build_restricted_globals",
    "compile_script",
    "decode_outcome",
    "validate_directives",
]
