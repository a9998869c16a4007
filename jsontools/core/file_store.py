"""
Format-aware file store: read JSON or NDJSON, write back in the same format.

- read_document: whole-document JSON first; on a syntax error, one JSON value per
  non-blank line (NDJSON). Any bad line fails the whole read.
- serialize_document / write_document: pretty JSON for SINGLE, one compact value
  per line for LINE_DELIMITED. Content is built fully in memory before the file
  is touched, so a serialization error leaves the old content on disk.
"""

import asyncio
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

from jsontools.core.errors import (
    DocumentNotFoundError,
    FileIOError,
    MalformedContentError,
    UnsupportedWriteShapeError,
)

logger = logging.getLogger(__name__)


class DocumentFormat(str, Enum):
    """On-disk shape of a document: one JSON value, or one JSON value per line."""

    SINGLE = "json"
    LINE_DELIMITED = "ndjson"


class LoadedDocument:
    """Parsed content of one input file plus the format it was read in."""

    __slots__ = ("path", "data", "format")

    def __init__(self, path: str, data: Any, format: DocumentFormat) -> None:
        self.path = path
        self.data = data
        self.format = format

    def __repr__(self) -> str:
        return f"LoadedDocument(path={self.path!r}, format={self.format.value})"


def _read_text(path: str) -> str:
    try:
        return Path(path).resolve().read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise DocumentNotFoundError(f"File not found: {path}", path=path) from e
    except UnicodeDecodeError as e:
        raise MalformedContentError(
            f"File {path} is not valid UTF-8 text: {e}", path=path
        ) from e
    except OSError as e:
        raise FileIOError(f"Error reading file {path}: {e}", path=path) from e


def parse_content(text: str, path: str) -> tuple[Any, DocumentFormat]:
    """Parse raw text as a JSON document, falling back to NDJSON."""
    try:
        return json.loads(text), DocumentFormat.SINGLE
    except json.JSONDecodeError as doc_err:
        items: list[Any] = []
        for line_number, line in enumerate(text.split("\n"), start=1):
            if not line.strip():
                continue
            try:
                items.append(json.loads(line))
            except json.JSONDecodeError as line_err:
                raise MalformedContentError(
                    f"Invalid NDJSON content in file: {path} on line {line_number}. "
                    f"Error: {line_err}. Original JSON parse error: {doc_err}",
                    path=path,
                    line_number=line_number,
                    line_error=str(line_err),
                    document_error=str(doc_err),
                ) from line_err
        return items, DocumentFormat.LINE_DELIMITED


def read_document(path: str) -> LoadedDocument:
    """Read and parse one file. Raises DocumentNotFoundError, FileIOError, MalformedContentError."""
    data, fmt = parse_content(_read_text(path), path)
    logger.debug("Read %s as %s", path, fmt.value)
    return LoadedDocument(path, data, fmt)


def serialize_document(value: Any, fmt: DocumentFormat, path: str | None = None) -> str:
    """Render value as file content for fmt. Raises UnsupportedWriteShapeError."""
    try:
        if fmt == DocumentFormat.SINGLE:
            return json.dumps(value, indent=2, ensure_ascii=False)
        if not isinstance(value, (list, tuple)):
            raise UnsupportedWriteShapeError(
                f"Invalid data for NDJSON: expected a list, got {type(value).__name__} for {path}",
                path=path,
            )
        lines = []
        for i, item in enumerate(value):
            if not isinstance(item, (dict, list, tuple)):
                raise UnsupportedWriteShapeError(
                    f"Invalid data for NDJSON: element {i} is {type(item).__name__}, "
                    f"expected an object or array, in {path}",
                    path=path,
                )
            lines.append(json.dumps(item, ensure_ascii=False, separators=(",", ":")))
    except (TypeError, ValueError) as e:
        raise UnsupportedWriteShapeError(
            f"Cannot serialize value as {fmt.value} for {path}: {e}", path=path
        ) from e
    return "\n".join(lines) + "\n" if lines else ""


def write_text(path: str, content: str) -> None:
    try:
        Path(path).resolve().write_text(content, encoding="utf-8")
    except OSError as e:
        raise FileIOError(f"Error writing file {path}: {e}", path=path) from e


def write_document(path: str, value: Any, fmt: DocumentFormat) -> None:
    """Serialize value in fmt and overwrite path."""
    write_text(path, serialize_document(value, fmt, path))
    logger.info("Wrote %s file %s", fmt.value, path)


async def aread_document(path: str) -> LoadedDocument:
    return await asyncio.to_thread(read_document, path)


async def awrite_text(path: str, content: str) -> None:
    await asyncio.to_thread(write_text, path, content)
