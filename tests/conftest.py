from __future__ import annotations

from pathlib import Path

import pytest

from skiff.agent import Context
from skiff.config import Settings
from skiff.tools import ToolRegistry, build_default_registry

_SKIFF_ENV_VARS = (
    "SKIFF_MODEL",
    "SKIFF_API_KEY",
    "SKIFF_API_BASE",
    "SKIFF_MAX_TOKENS",
    "SKIFF_SYSTEM_PROMPT",
    "SKIFF_MAX_ITERATIONS",
    "SKIFF_MAX_READ_BYTES",
    "SKIFF_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clear_skiff_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _SKIFF_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, model="openai:gpt-4o-mini")


@pytest.fixture
def context(workspace: Path, settings: Settings) -> Context:
    return Context(workspace, settings)


@pytest.fixture
def registry(context: Context) -> ToolRegistry:
    return build_default_registry(context)
