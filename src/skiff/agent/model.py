"""Model client boundary.

The agent talks to the text-generation service through :class:`ModelClient`:
one blocking request carrying the chat history and the tool definitions, one
response made of ordered text and tool-use blocks. :class:`RepublicModel` is
the default implementation on top of ``republic.LLM``.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Protocol, Union

from loguru import logger
from republic import LLM, Tool


@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass(frozen=True)
class ToolUseBlock:
    id: str
    name: str
    input: dict[str, Any] = field(default_factory=dict)


ResponseBlock = Union[TextBlock, ToolUseBlock]


@dataclass(frozen=True)
class ModelResponse:
    blocks: list[ResponseBlock]


class ModelClient(Protocol):
    def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        tools: list[Tool],
        max_tokens: int,
    ) -> ModelResponse: ...


class RepublicModel:
    """ModelClient backed by a republic LLM."""

    def __init__(
        self,
        model: str,
        *,
        api_key: str | None = None,
        api_base: str | None = None,
        system_prompt: str | None = None,
    ) -> None:
        self._llm = LLM(model=model, api_key=api_key, api_base=api_base)
        self._system_prompt = system_prompt or ""

    @property
    def name(self) -> str:
        """Return the resolved provider:model string for display."""
        return f"{self._llm.provider}:{self._llm.model}"

    def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        tools: list[Tool],
        max_tokens: int,
    ) -> ModelResponse:
        if self._system_prompt:
            messages = [{"role": "system", "content": self._system_prompt}, *messages]
        response = self._llm.chat.raw(messages=messages, tools=tools, max_tokens=max_tokens)
        return parse_response(response)


def parse_response(response: Any) -> ModelResponse:
    """Convert an OpenAI-style chat completion into ordered blocks."""
    if isinstance(response, str):
        return ModelResponse(blocks=[TextBlock(response)] if response else [])
    choices = getattr(response, "choices", None)
    if not choices:
        return ModelResponse(blocks=[])
    message = getattr(choices[0], "message", None)
    if message is None:
        return ModelResponse(blocks=[])

    blocks: list[ResponseBlock] = []
    text = getattr(message, "content", None)
    if isinstance(text, str) and text.strip():
        blocks.append(TextBlock(text))
    for tool_call in getattr(message, "tool_calls", None) or []:
        function = getattr(tool_call, "function", None)
        if function is None:
            continue
        call_id = getattr(tool_call, "id", None) or f"call_{uuid.uuid4().hex[:12]}"
        name = getattr(function, "name", "") or ""
        arguments = _decode_arguments(name, getattr(function, "arguments", None))
        blocks.append(ToolUseBlock(id=call_id, name=name, input=arguments))
    return ModelResponse(blocks=blocks)


def _decode_arguments(name: str, arguments: object) -> dict[str, Any]:
    if isinstance(arguments, dict):
        return arguments
    if not isinstance(arguments, str) or not arguments.strip():
        return {}
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError:
        logger.warning("model.tool_call.bad_arguments name={} arguments={!r}", name, arguments[:200])
        return {}
    if not isinstance(parsed, dict):
        logger.warning("model.tool_call.bad_arguments name={} arguments={!r}", name, arguments[:200])
        return {}
    return parsed
