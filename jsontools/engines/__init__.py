"""
Engines: Script (RestrictedPython) and JsonToolsExecutor (query, nodes, eval, multi_eval).
"""

from jsontools.engines.executor import EvalResult, JsonToolsExecutor
from jsontools.engines.script import ScriptContext, ScriptExecutor

__all__ = [
    "EvalResult",
    "JsonToolsExecutor",
    "ScriptExecutor",
    "ScriptContext",
]
