"""Tool factory functions."""

from .fs import create_list_tool, create_read_tool, create_write_tool

__all__ = [
    "create_list_tool",
    "create_read_tool",
    "create_write_tool",
]
