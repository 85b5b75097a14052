"""Core agent implementation for Skiff."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from loguru import logger

from ..errors import AgentTerminatedError
from .context import Context
from .conversation import AssistantTurn, Conversation, ToolInvocation, ToolResult, UserTurn
from .model import ModelClient, ModelResponse, TextBlock, ToolUseBlock

if TYPE_CHECKING:
    from ..tools.registry import ToolRegistry


class AgentState(str, Enum):
    AWAITING_USER_INPUT = "awaiting_user_input"
    REQUEST_PENDING = "request_pending"
    DISPATCHING_TOOLS = "dispatching_tools"
    TERMINATING = "terminating"


@dataclass(frozen=True)
class AgentEvent:
    kind: str
    payload: dict[str, Any]


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one human turn."""

    texts: list[str] = field(default_factory=list)
    tool_calls: int = 0
    requests: int = 0
    skipped: bool = False
    error: str | None = None

    @property
    def output(self) -> str:
        return "\n".join(self.texts)


EventHandler = Callable[[AgentEvent], None]


class Agent:
    """Drives the request/dispatch cycle for one conversation.

    Each human turn is appended to the conversation and sent to the model
    together with the tool definitions. Response blocks are handled in order:
    text is surfaced and recorded, tool calls are executed and their results
    recorded under the call id. With the default ``max_iterations`` of 1 the
    agent hands control back to the user after a single model response, and
    tool results reach the model with the next human turn.
    """

    def __init__(
        self,
        context: Context,
        model: ModelClient,
        registry: ToolRegistry,
        *,
        conversation: Conversation | None = None,
        max_tokens: int | None = None,
        max_iterations: int | None = None,
    ) -> None:
        settings = context.settings
        self._context = context
        self._model = model
        self._registry = registry
        self._conversation = conversation if conversation is not None else Conversation()
        self._max_tokens = max_tokens if max_tokens is not None else settings.max_tokens
        self._max_iterations = max(1, max_iterations if max_iterations is not None else settings.max_iterations)
        self._model_tools = registry.model_tools()
        self._state = AgentState.AWAITING_USER_INPUT

    @property
    def state(self) -> AgentState:
        return self._state

    @property
    def conversation(self) -> Conversation:
        return self._conversation

    @property
    def context(self) -> Context:
        return self._context

    @property
    def tool_names(self) -> list[str]:
        return self._registry.names()

    def terminate(self) -> None:
        self._state = AgentState.TERMINATING

    def handle_input(self, text: str, on_event: EventHandler | None = None) -> TurnResult:
        """Resolve one human turn, including every tool call it triggers."""
        if self._state is AgentState.TERMINATING:
            raise AgentTerminatedError("Agent is terminating.")
        if not text.strip():
            return TurnResult(skipped=True)

        self._conversation.append(UserTurn(text))
        texts: list[str] = []
        tool_calls = 0
        requests = 0
        try:
            for _ in range(self._max_iterations):
                self._state = AgentState.REQUEST_PENDING
                try:
                    response = self._model.complete(
                        self._conversation.to_messages(),
                        tools=self._model_tools,
                        max_tokens=self._max_tokens,
                    )
                except Exception as exc:
                    # Transport and provider errors end the turn, not the session.
                    logger.error("model.request.error error={}", exc)
                    logger.opt(exception=True).debug("model.request.error traceback")
                    error = f"model request failed: {exc!s}"
                    if on_event:
                        on_event(AgentEvent("error", {"message": error}))
                    return TurnResult(texts=texts, tool_calls=tool_calls, requests=requests, error=error)
                requests += 1
                dispatched = self._process_response(response, texts, on_event)
                tool_calls += dispatched
                if dispatched == 0:
                    break
            return TurnResult(texts=texts, tool_calls=tool_calls, requests=requests)
        finally:
            if self._state is not AgentState.TERMINATING:
                self._state = AgentState.AWAITING_USER_INPUT

    def _process_response(
        self,
        response: ModelResponse,
        texts: list[str],
        on_event: EventHandler | None,
    ) -> int:
        dispatched = 0
        for block in response.blocks:
            if isinstance(block, TextBlock):
                self._conversation.append(AssistantTurn(block.text))
                texts.append(block.text)
                if on_event:
                    on_event(AgentEvent("text", {"text": block.text}))
            elif isinstance(block, ToolUseBlock):
                self._state = AgentState.DISPATCHING_TOOLS
                if self._dispatch(block, on_event):
                    dispatched += 1
        return dispatched

    def _dispatch(self, block: ToolUseBlock, on_event: EventHandler | None) -> bool:
        self._conversation.append(ToolInvocation(id=block.id, name=block.name, input=block.input))
        if not self._registry.has(block.name):
            # Keeps the call/result pairing intact for the next request.
            logger.warning("tool.unknown name={} id={}", block.name, block.id)
            self._conversation.append(ToolResult(invocation_id=block.id, payload=f"unknown tool: {block.name}"))
            return False

        if on_event:
            on_event(AgentEvent("tool_call", {"id": block.id, "name": block.name, "input": block.input}))
        outcome = self._registry.execute(block.name, block.input)
        assert outcome is not None

        payload = outcome.render()
        self._conversation.append(ToolResult(invocation_id=block.id, payload=payload))
        if on_event:
            on_event(
                AgentEvent(
                    "tool_result",
                    {"id": block.id, "name": block.name, "ok": outcome.success, "output": payload},
                )
            )
        return True
