"""
Pydantic schemas for the /tools API.
"""

from typing import Any

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    """Body for POST /tools/query and /tools/nodes."""

    file_path: str = Field(
        ...,
        min_length=1,
        description="Absolute path to the JSON or NDJSON file.",
    )
    json_path: str = Field(
        ...,
        min_length=1,
        description="JSONPath expression. Use `$.path` for JSON objects and `$[selector]` for NDJSON arrays.",
    )
    count: int | None = Field(
        default=None, ge=1, description="Maximum number of results."
    )


class EvalRequest(BaseModel):
    """Body for POST /tools/eval."""

    file_path: str = Field(..., min_length=1)
    code: str = Field(
        ...,
        description=(
            "Python code run with the file content as `data`, pydash as `py_` and "
            "JSONPath as `jp`. The last expression is the result; to rewrite the file "
            "end with {'type': 'updateFile', 'data': new_data}."
        ),
    )


class MultiEvalRequest(BaseModel):
    """Body for POST /tools/multi-eval."""

    file_paths: list[str] = Field(..., min_length=1)
    code: str = Field(
        ...,
        description=(
            "Python code run with the list of file contents as `data`. To rewrite files "
            "end with {'type': 'updateMultipleFiles', 'updates': [{'index': i, 'data': ...}]}."
        ),
    )


class ToolResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: Any = None
