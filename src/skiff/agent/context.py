"""Context for the agent package."""

from __future__ import annotations

from pathlib import Path

from ..config import Settings, get_settings


class Context:
    """Agent environment context: sandbox root and settings."""

    def __init__(self, workspace_path: Path | str | None = None, settings: Settings | None = None) -> None:
        resolved_path = Path.cwd() if workspace_path is None else Path(workspace_path)
        self.workspace_path = resolved_path.resolve()
        self.settings = settings or get_settings(self.workspace_path)
