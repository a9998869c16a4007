"""
JsonToolsExecutor: query, nodes, eval, multi_eval over JSON/NDJSON files.

eval / multi_eval flow: read -> run script -> decode outcome -> write (only for
update instructions). Multi-file reads and writes fan out with asyncio.gather;
the script run in between is the one blocking step.
"""

import asyncio
import logging
from typing import Any

from jsontools.core.errors import JsonToolsError
from jsontools.core.file_store import (
    DocumentFormat,
    LoadedDocument,
    aread_document,
    awrite_text,
    serialize_document,
)
from jsontools.engines.script import (
    ScriptContext,
    ScriptExecutor,
    UpdateFile,
    UpdateMultipleFiles,
    decode_outcome,
    validate_directives,
)
from jsontools.engines.script.modules import jsonpath
from jsontools.engines.script.outcome import EvalStage

_log = logging.getLogger(__name__)


class EvalResult:
    """
    Result of eval / multi_eval: either the script's pass-through value, or the
    files rewritten as (path, format) pairs.
    """

    __slots__ = ("value", "updated", "multi")

    def __init__(
        self,
        *,
        value: Any = None,
        updated: list[tuple[str, DocumentFormat]] | None = None,
        multi: bool = False,
    ) -> None:
        self.value = value
        self.updated = updated
        self.multi = multi

    @property
    def is_update(self) -> bool:
        return self.updated is not None


class _Invocation:
    """Tracks the stage of one eval call for logging."""

    __slots__ = ("label", "stage")

    def __init__(self, label: str) -> None:
        self.label = label
        self.stage = EvalStage.IDLE

    def advance(self, stage: EvalStage) -> None:
        self.stage = stage
        _log.debug("%s: %s", self.label, stage.value)

    def fail(self, exc: Exception) -> None:
        _log.warning("%s failed while %s: %s", self.label, self.stage.value, exc)
        self.stage = EvalStage.FAILED


class JsonToolsExecutor:
    """
    query(file_path, json_path, count) -> list
    nodes(file_path, json_path, count) -> list[{"path", "value"}]
    eval(file_path, code) -> EvalResult
    multi_eval(file_paths, code) -> EvalResult
    """

    def __init__(self, script_executor: ScriptExecutor | None = None) -> None:
        self._scripts = script_executor or ScriptExecutor()

    async def query(
        self, file_path: str, json_path: str, count: int | None = None
    ) -> list[Any]:
        doc = await aread_document(file_path)
        return jsonpath.query(doc.data, json_path, count)

    async def nodes(
        self, file_path: str, json_path: str, count: int | None = None
    ) -> list[dict[str, Any]]:
        doc = await aread_document(file_path)
        return jsonpath.nodes(doc.data, json_path, count)

    async def eval(self, file_path: str, code: str) -> EvalResult:
        run = _Invocation(f"eval {file_path}")
        try:
            run.advance(EvalStage.READING)
            doc = await aread_document(file_path)

            run.advance(EvalStage.EXECUTING)
            value = self._scripts.execute(code, ScriptContext(doc.data))

            run.advance(EvalStage.INTERPRETING)
            outcome = decode_outcome(value)
            if not isinstance(outcome, UpdateFile):
                run.advance(EvalStage.DONE)
                return EvalResult(value=outcome.value)

            run.advance(EvalStage.WRITING)
            content = serialize_document(outcome.data, doc.format, doc.path)
            await awrite_text(doc.path, content)
            _log.info("Updated %s file %s", doc.format.value, doc.path)
            run.advance(EvalStage.DONE)
            return EvalResult(updated=[(doc.path, doc.format)])
        except JsonToolsError as e:
            run.fail(e)
            raise

    async def multi_eval(self, file_paths: list[str], code: str) -> EvalResult:
        run = _Invocation(f"multi_eval [{len(file_paths)} files]")
        try:
            run.advance(EvalStage.READING)
            docs: list[LoadedDocument] = list(
                await asyncio.gather(*(aread_document(p) for p in file_paths))
            )

            run.advance(EvalStage.EXECUTING)
            value = self._scripts.execute(code, ScriptContext([d.data for d in docs]))

            run.advance(EvalStage.INTERPRETING)
            outcome = decode_outcome(value, multi=True)
            if not isinstance(outcome, UpdateMultipleFiles):
                run.advance(EvalStage.DONE)
                return EvalResult(value=outcome.value, multi=True)

            directives = validate_directives(outcome.updates, len(docs))
            # Last directive per index wins; each file is written at most once.
            pending: dict[int, str] = {}
            for directive in directives:
                target = docs[directive.index]
                if not directive.has_data:
                    _log.warning(
                        "Invalid update instruction for file index %s (%s), skipping.",
                        directive.index,
                        target.path,
                    )
                    continue
                pending[directive.index] = serialize_document(
                    directive.data, target.format, target.path
                )

            run.advance(EvalStage.WRITING)
            updated = await self._write_all(docs, pending)
            run.advance(EvalStage.DONE)
            return EvalResult(updated=updated, multi=True)
        except JsonToolsError as e:
            run.fail(e)
            raise

    async def _write_all(
        self, docs: list[LoadedDocument], pending: dict[int, str]
    ) -> list[tuple[str, DocumentFormat]]:
        indices = sorted(pending)
        results = await asyncio.gather(
            *(awrite_text(docs[i].path, pending[i]) for i in indices),
            return_exceptions=True,
        )
        written = [
            (docs[i].path, docs[i].format)
            for i, r in zip(indices, results)
            if not isinstance(r, BaseException)
        ]
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            _log.error(
                "%d of %d writes failed; written: %s",
                len(failures),
                len(indices),
                ", ".join(p for p, _ in written) or "none",
            )
            raise failures[0]
        for path, fmt in written:
            _log.info("Updated %s file %s", fmt.value, path)
        return written
