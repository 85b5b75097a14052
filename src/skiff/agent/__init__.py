"""Agent package for Skiff."""

from .context import Context
from .conversation import AssistantTurn, Conversation, ToolInvocation, ToolResult, Turn, UserTurn
from .core import Agent, AgentEvent, AgentState, TurnResult
from .model import ModelClient, ModelResponse, RepublicModel, TextBlock, ToolUseBlock

__all__ = [
    "Agent",
    "AgentEvent",
    "AgentState",
    "AssistantTurn",
    "Context",
    "Conversation",
    "ModelClient",
    "ModelResponse",
    "RepublicModel",
    "TextBlock",
    "ToolInvocation",
    "ToolResult",
    "ToolUseBlock",
    "Turn",
    "TurnResult",
    "UserTurn",
]
