"""Command line interface for Skiff."""

from .app import app
from .render import Renderer

__all__ = [
    "Renderer",
    "app",
]
