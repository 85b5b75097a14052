"""Tools package for Skiff."""

from ..agent.context import Context
from .factories import create_list_tool, create_read_tool, create_write_tool
from .registry import ToolDescriptor, ToolRegistry
from .results import ToolFailure, ToolOutcome


def build_default_registry(context: Context) -> ToolRegistry:
    """Build the built-in tool set bound to the workspace context."""
    registry = ToolRegistry()
    for factory in (create_read_tool, create_list_tool, create_write_tool):
        registry.register(factory(context))
    return registry


__all__ = [
    "ToolDescriptor",
    "ToolFailure",
    "ToolOutcome",
    "ToolRegistry",
    "build_default_registry",
]
