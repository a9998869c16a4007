"""
Text rendering for eval / multi_eval results.

- Update results: a one-line success message naming the file(s).
- dict/list values: indented JSON. Strings pass through; other primitives as JSON.
"""

import json
from typing import Any

from jsontools.engines.executor import EvalResult
from jsontools.engines.script import NO_VALUE

NO_OUTPUT_MESSAGE = "Evaluation produced no stringifiable output."
NO_UPDATES_MESSAGE = "Evaluation successful, no files were modified or specified for update."


def render_value(value: Any) -> str:
    """Render a pass-through script value as text."""
    if value is NO_VALUE:
        return NO_OUTPUT_MESSAGE
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, indent=2, ensure_ascii=False, default=str)
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def render_eval_result(result: EvalResult) -> str:
    if not result.is_update:
        return render_value(result.value)
    if not result.multi:
        path, fmt = result.updated[0]
        return f"Successfully updated {fmt.value} file: {path}"
    if not result.updated:
        return NO_UPDATES_MESSAGE
    return "Successfully updated files: " + ", ".join(p for p, _ in result.updated)
