"""Configuration management for Skiff."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import InvalidModelFormatError, ModelNotConfiguredError, WorkspaceNotFoundError

MAX_READ_BYTES = 10 * 1024 * 1024
WORKSPACE_PROMPT_FILE = "skiff.md"
MAX_WORKSPACE_PROMPT_CHARS = 32_000
MODEL_NOT_CONFIGURED_ERROR = "Model not configured. Set SKIFF_MODEL (e.g., 'anthropic:claude-3-5-sonnet-20240620')."


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SKIFF_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    model: str | None = Field(default=None, description="Model in provider:model format")
    api_key: str | None = Field(default=None, description="API key for the LLM provider")
    api_base: str | None = Field(default=None, description="Optional API base URL")
    max_tokens: int = Field(default=1000, ge=1, description="Generation limit per request")

    # Agent Configuration
    system_prompt: str | None = Field(default=None, description="System prompt for the agent")
    max_iterations: int = Field(default=1, ge=1, description="Model requests allowed per human turn")
    max_read_bytes: int = Field(default=MAX_READ_BYTES, ge=0, description="Largest file read_file will return")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")

    def require_model(self) -> str:
        """Return the configured model or raise a configuration error."""
        if not self.model:
            raise ModelNotConfiguredError(MODEL_NOT_CONFIGURED_ERROR)
        provider, sep, name = self.model.partition(":")
        if not sep or not provider or not name:
            raise InvalidModelFormatError(f"Model must be in provider:model format, got {self.model!r}.")
        return self.model


def read_workspace_prompt(workspace_path: Path) -> str:
    """Read the workspace prompt file, if present."""
    prompt_path = workspace_path / WORKSPACE_PROMPT_FILE
    if not prompt_path.is_file():
        return ""
    try:
        text = prompt_path.read_text(encoding="utf-8")
    except OSError:
        return ""
    return text.strip()[:MAX_WORKSPACE_PROMPT_CHARS]


def resolve_workspace(workspace_path: Path | None) -> Path:
    """Return the absolute sandbox root, defaulting to the current directory."""
    resolved = (workspace_path or Path.cwd()).resolve()
    if not resolved.is_dir():
        raise WorkspaceNotFoundError(f"Workspace does not exist: {resolved}")
    return resolved


def get_settings(workspace_path: Path | None = None) -> Settings:
    """Get application settings.

    Args:
        workspace_path: Optional workspace whose ``.env`` file should be read.

    Returns:
        Settings instance
    """
    if workspace_path is None:
        return Settings()
    return Settings(_env_file=workspace_path / ".env")
