"""
Tools API: query, nodes, eval, multi-eval over local JSON/NDJSON files.

Errors raised by the executor (JsonToolsError) are turned into responses by the
handler registered in jsontools.main.
"""

from fastapi import APIRouter

from jsontools.core.formatting import render_eval_result
from jsontools.engines import JsonToolsExecutor
from jsontools.schemas import EvalRequest, MultiEvalRequest, QueryRequest, ToolResponse

router = APIRouter(prefix="/tools", tags=["tools"])


@router.post("/query")
async def query(body: QueryRequest) -> ToolResponse:
    """Values matching a JSONPath expression. NDJSON files are queried as an array."""
    data = await JsonToolsExecutor().query(body.file_path, body.json_path, body.count)
    return ToolResponse(data=data)


@router.post("/nodes")
async def nodes(body: QueryRequest) -> ToolResponse:
    """Matches as {path, value} pairs."""
    data = await JsonToolsExecutor().nodes(body.file_path, body.json_path, body.count)
    return ToolResponse(data=data)


@router.post("/eval")
async def eval_file(body: EvalRequest) -> ToolResponse:
    """
    Run code against one file. WARNING: executes caller-supplied code (sandboxed,
    time-limited).
    """
    result = await JsonToolsExecutor().eval(body.file_path, body.code)
    return ToolResponse(data=render_eval_result(result))


@router.post("/multi-eval")
async def multi_eval(body: MultiEvalRequest) -> ToolResponse:
    """Run code against several files at once."""
    result = await JsonToolsExecutor().multi_eval(body.file_paths, body.code)
    return ToolResponse(data=render_eval_result(result))
