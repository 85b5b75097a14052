"""Conversation history for one session."""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class UserTurn:
    text: str


@dataclass(frozen=True)
class AssistantTurn:
    text: str


@dataclass(frozen=True)
class ToolInvocation:
    id: str
    name: str
    input: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResult:
    invocation_id: str
    payload: str


Turn = Union[UserTurn, AssistantTurn, ToolInvocation, ToolResult]


class Conversation:
    """Append-only, order-preserving sequence of turns.

    The whole sequence is resubmitted to the model on every request, so turns
    are never reordered, edited or dropped once appended.
    """

    def __init__(self) -> None:
        self._turns: list[Turn] = []

    def append(self, turn: Turn) -> None:
        if not isinstance(turn, (UserTurn, AssistantTurn, ToolInvocation, ToolResult)):
            raise TypeError(f"Unsupported turn type: {type(turn).__name__}")
        self._turns.append(turn)

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def pending_invocations(self) -> list[ToolInvocation]:
        """Return invocations that have no matching result yet."""
        answered = {turn.invocation_id for turn in self._turns if isinstance(turn, ToolResult)}
        return [turn for turn in self._turns if isinstance(turn, ToolInvocation) and turn.id not in answered]

    def to_messages(self) -> list[dict[str, Any]]:
        """Serialize the history into chat messages for the model client."""
        messages: list[dict[str, Any]] = []
        for turn in self._turns:
            if isinstance(turn, UserTurn):
                messages.append({"role": "user", "content": turn.text})
            elif isinstance(turn, AssistantTurn):
                messages.append({"role": "assistant", "content": turn.text})
            elif isinstance(turn, ToolInvocation):
                messages.append({
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": turn.id,
                            "type": "function",
                            "function": {
                                "name": turn.name,
                                "arguments": json.dumps(turn.input, ensure_ascii=False),
                            },
                        }
                    ],
                })
            else:
                messages.append({"role": "tool", "tool_call_id": turn.invocation_id, "content": turn.payload})
        return messages
