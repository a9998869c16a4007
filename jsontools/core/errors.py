"""
Error kinds surfaced by the file store, the script engine and the orchestrator.

Every error carries a short ``kind`` tag and, where one applies, the file path
involved. The HTTP layer maps ``status_code`` onto the response.
"""

from __future__ import annotations


class JsonToolsError(Exception):
    """Base class for all errors reported back to the caller."""

    kind = "Error"
    status_code = 500

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class DocumentNotFoundError(JsonToolsError):
    """Input file does not exist."""

    kind = "NotFound"
    status_code = 404


class MalformedContentError(JsonToolsError):
    """Content is neither a JSON document nor valid NDJSON."""

    kind = "MalformedContent"
    status_code = 422

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        line_number: int | None = None,
        line_error: str | None = None,
        document_error: str | None = None,
    ) -> None:
        super().__init__(message, path=path)
        self.line_number = line_number
        self.line_error = line_error
        self.document_error = document_error


class FileIOError(JsonToolsError):
    """Permission or device failure while reading or writing a file."""

    kind = "IOFailure"
    status_code = 500


class ScriptExecutionError(JsonToolsError):
    """The script failed to compile or raised while running."""

    kind = "ScriptError"
    status_code = 400


class ScriptTimeoutError(JsonToolsError):
    """The script ran past its execution budget."""

    kind = "TimeoutExceeded"
    status_code = 408


class InvalidMutationDirectiveError(JsonToolsError):
    """A multi-file update referenced a file outside the input list."""

    kind = "InvalidMutationDirective"
    status_code = 403


class UnsupportedWriteShapeError(JsonToolsError):
    """Value cannot be written in the file's format."""

    kind = "UnsupportedWriteShape"
    status_code = 422


class InvalidPathExpressionError(JsonToolsError):
    """JSONPath expression could not be parsed."""

    kind = "InvalidPathExpression"
    status_code = 400
