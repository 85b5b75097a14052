"""Tool outcome types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ToolFailure(str, Enum):
    """Closed set of failure kinds; each value is the text the model reads back."""

    INVALID_PATH = "invalid path"
    ACCESS_DENIED = "access denied"
    NOT_FOUND = "does not exist"
    IS_DIRECTORY = "is a directory"
    NOT_DIRECTORY = "not a directory"
    TOO_LARGE = "too large"
    EXTENSION_NOT_ALLOWED = "extension not allowed"
    SENSITIVE_FILE = "sensitive file blocked"
    EXISTS_NO_OVERWRITE = "exists and overwrite is false"
    INVALID_ARGUMENTS = "invalid arguments"
    READ_ERROR = "error reading file"
    WRITE_ERROR = "error writing file"
    LIST_ERROR = "error listing directory"
    TOOL_ERROR = "error"


@dataclass(frozen=True)
class ToolOutcome:
    """Result of one tool execution: a payload or a failure kind."""

    payload: str | None = None
    failure: ToolFailure | None = None
    detail: str | None = None

    @classmethod
    def ok(cls, payload: str) -> ToolOutcome:
        return cls(payload=payload)

    @classmethod
    def fail(cls, failure: ToolFailure, detail: str | None = None) -> ToolOutcome:
        return cls(failure=failure, detail=detail)

    @property
    def success(self) -> bool:
        return self.failure is None

    def render(self) -> str:
        """Render the outcome as the text fed back into the conversation."""
        if self.failure is None:
            return self.payload or ""
        if self.detail:
            return f"{self.failure.value}: {self.detail}"
        return self.failure.value
