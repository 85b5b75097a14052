"""Skiff - a small agent for working inside a project directory."""

from .agent import Agent, Context, Conversation
from .tools import ToolRegistry, build_default_registry

__version__ = "0.1.0"

__all__ = ["Agent", "Context", "Conversation", "ToolRegistry", "build_default_registry"]
