"""
Script outcome decoding: a script's final value is decoded once into
UpdateFile, UpdateMultipleFiles or PlainValue.

    {"type": "updateFile", "data": <new content>}
    {"type": "updateMultipleFiles", "updates": [{"index": 0, "data": ...}, ...]}

Anything else (including an updateFile without "data") is a PlainValue.
"""

from enum import Enum
from typing import Any

from jsontools.core.errors import InvalidMutationDirectiveError

UPDATE_FILE = "updateFile"
UPDATE_MULTIPLE_FILES = "updateMultipleFiles"


class _NoValue:
    """The script produced no final value."""

    _instance = None

    def __new__(cls) -> "_NoValue":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __bool__(self) -> bool:
        return False


NO_VALUE = _NoValue()


class EvalStage(str, Enum):
    """Stages of one eval / multi_eval invocation."""

    IDLE = "idle"
    READING = "reading"
    EXECUTING = "executing"
    INTERPRETING = "interpreting"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


class UpdateFile:
    __slots__ = ("data",)

    def __init__(self, data: Any) -> None:
        self.data = data


class UpdateDirective:
    """One entry of an updateMultipleFiles instruction. has_data is False when "data" was omitted."""

    __slots__ = ("index", "data", "has_data")

    def __init__(self, index: int, data: Any = None, *, has_data: bool = True) -> None:
        self.index = index
        self.data = data
        self.has_data = has_data


class UpdateMultipleFiles:
    __slots__ = ("updates",)

    def __init__(self, updates: list[Any]) -> None:
        # Raw entries; validate_directives turns them into UpdateDirective.
        self.updates = updates


class PlainValue:
    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value


ScriptOutcome = UpdateFile | UpdateMultipleFiles | PlainValue


def decode_outcome(value: Any, *, multi: bool = False) -> ScriptOutcome:
    """
    Classify a script's final value. Single-file mode only recognises
    updateFile; multi-file mode only recognises updateMultipleFiles.
    """
    if isinstance(value, dict):
        kind = value.get("type")
        if not multi and kind == UPDATE_FILE and "data" in value:
            return UpdateFile(value["data"])
        if multi and kind == UPDATE_MULTIPLE_FILES and isinstance(
            value.get("updates"), (list, tuple)
        ):
            return UpdateMultipleFiles(list(value["updates"]))
    return PlainValue(value)


def validate_directives(updates: list[Any], file_count: int) -> list[UpdateDirective]:
    """
    Validate every directive before anything is written.

    Any entry that is not a dict, or whose index is not an int in
    [0, file_count), rejects the whole batch with InvalidMutationDirectiveError.
    Entries without "data" are kept with has_data=False for the caller to skip.
    """
    directives: list[UpdateDirective] = []
    for position, raw in enumerate(updates):
        if not isinstance(raw, dict):
            raise InvalidMutationDirectiveError(
                f"Security violation: update #{position} is not an object."
            )
        index = raw.get("index")
        if (
            not isinstance(index, int)
            or isinstance(index, bool)
            or index < 0
            or index >= file_count
        ):
            raise InvalidMutationDirectiveError(
                f"Security violation: Invalid file index {index!r} provided for update."
            )
        if "data" in raw:
            directives.append(UpdateDirective(index, raw["data"]))
        else:
            directives.append(UpdateDirective(index, has_data=False))
    return directives
