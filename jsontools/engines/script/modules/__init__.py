"""
Script context modules: py_ (pydash), jp (JSONPath).
"""

from jsontools.engines.script.modules.collections import make_collections_module
from jsontools.engines.script.modules.jsonpath import make_jsonpath_module

__all__ = [
    "make_collections_module",
    "make_jsonpath_module",
]
