"""
ScriptContext: data, py_, jp for one script run.
"""

from typing import Any

from .modules import make_collections_module, make_jsonpath_module

DATA_NAME = "data"


class ScriptContext:
    """
    Injects the loaded value(s) as `data`, pydash as `py_` and JSONPath as `jp`.
    Built fresh for each run; nothing is shared between runs.
    """

    def __init__(self, data: Any) -> None:
        self.data = data
        self.py_ = make_collections_module()
        self.jp = make_jsonpath_module()

    def to_dict(self) -> dict[str, Any]:
        """Namespace bindings for exec(compiled, globals)."""
        return {
            DATA_NAME: self.data,
            "py_": self.py_,
            "jp": self.jp,
        }
