"""Application-level exception types for Skiff."""

from __future__ import annotations


class SkiffError(Exception):
    """Base exception for Skiff."""


class ConfigurationError(SkiffError):
    """Base exception for configuration and startup validation errors."""


class WorkspaceNotFoundError(ConfigurationError):
    """Raised when the configured workspace path does not exist."""


class ModelNotConfiguredError(ConfigurationError):
    """Raised when model configuration is missing."""


class InvalidModelFormatError(ConfigurationError):
    """Raised when model format is not provider:model."""


class AgentTerminatedError(SkiffError):
    """Raised when input is handed to an agent that is shutting down."""
