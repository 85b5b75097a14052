import json
import os
from pathlib import Path
from typing import Any

import pytest

from skiff.agent import Context
from skiff.config import Settings
from skiff.tools import ToolFailure, ToolRegistry, build_default_registry


def _run(registry: ToolRegistry, name: str, **kwargs: Any) -> str:
    outcome = registry.execute(name, kwargs)
    assert outcome is not None
    return outcome.render()


@pytest.mark.parametrize("name", ["read_file", "list_files", "write_file"])
@pytest.mark.parametrize("path", ["../outside.txt", "a/../../outside.txt", "/etc/hosts"])
def test_every_tool_denies_paths_outside_workspace(registry: ToolRegistry, name: str, path: str) -> None:
    kwargs: dict[str, Any] = {"path": path}
    if name == "write_file":
        kwargs.update(content="x", overwrite=True)

    assert _run(registry, name, **kwargs) == "invalid path"


def test_write_outside_workspace_does_not_create_file(tmp_path: Path, registry: ToolRegistry) -> None:
    _run(registry, "write_file", path="../escaped.txt", content="x")

    assert not (tmp_path / "escaped.txt").exists()


def test_read_file_returns_contents(workspace: Path, registry: ToolRegistry) -> None:
    (workspace / "app.js").write_text("console.log('hi');\n", encoding="utf-8")

    assert _run(registry, "read_file", path="app.js") == "console.log('hi');\n"


def test_read_file_keeps_line_endings(workspace: Path, registry: ToolRegistry) -> None:
    (workspace / "crlf.txt").write_bytes(b"one\r\ntwo\r\n")

    assert _run(registry, "read_file", path="crlf.txt") == "one\r\ntwo\r\n"


def test_read_file_failures(workspace: Path, registry: ToolRegistry) -> None:
    (workspace / "docs").mkdir()
    (workspace / "logo.png").write_bytes(b"\x89PNG")

    assert _run(registry, "read_file", path="missing.txt") == "does not exist"
    assert _run(registry, "read_file", path="docs") == "is a directory"
    assert _run(registry, "read_file", path="logo.png") == "extension not allowed"


def test_read_file_allows_extensionless_files(workspace: Path, registry: ToolRegistry) -> None:
    (workspace / "Makefile").write_text("all:\n\techo ok\n", encoding="utf-8")

    assert _run(registry, "read_file", path="Makefile") == "all:\n\techo ok\n"


@pytest.mark.parametrize("name", [".env", ".env.production", "secrets.yaml", "server.pem"])
def test_read_file_blocks_sensitive_files(workspace: Path, registry: ToolRegistry, name: str) -> None:
    (workspace / name).write_text("API_KEY=123", encoding="utf-8")

    assert _run(registry, "read_file", path=name) == "sensitive file blocked"


def test_read_file_blocks_sensitive_name_even_when_missing(registry: ToolRegistry) -> None:
    assert _run(registry, "read_file", path="config/.env") == "sensitive file blocked"


def test_read_file_blocks_symlink_to_sensitive_file(workspace: Path, registry: ToolRegistry) -> None:
    (workspace / ".env").write_text("TOKEN=abc", encoding="utf-8")
    (workspace / "notes.txt").symlink_to(workspace / ".env")

    assert _run(registry, "read_file", path="notes.txt") == "sensitive file blocked"


def test_read_file_size_ceiling_is_inclusive(workspace: Path) -> None:
    context = Context(workspace, Settings(_env_file=None, max_read_bytes=8))
    registry = build_default_registry(context)
    (workspace / "exact.txt").write_bytes(b"12345678")
    (workspace / "over.txt").write_bytes(b"123456789")

    assert _run(registry, "read_file", path="exact.txt") == "12345678"
    assert _run(registry, "read_file", path="over.txt") == "too large"


def test_read_file_default_ceiling_is_ten_mebibytes(context: Context) -> None:
    assert context.settings.max_read_bytes == 10 * 1024 * 1024


def test_list_files_reports_entries(workspace: Path, registry: ToolRegistry) -> None:
    (workspace / "app.js").write_text("x" * 12, encoding="utf-8")
    (workspace / "tools").mkdir()

    entries = json.loads(_run(registry, "list_files"))

    by_name = {entry["name"]: entry for entry in entries}
    assert set(by_name) == {"app.js", "tools"}
    assert by_name["app.js"]["type"] == "file"
    assert by_name["app.js"]["size"] == 12
    assert "modified" in by_name["app.js"]
    assert by_name["tools"] == {"name": "tools", "type": "directory"}


def test_list_files_of_subdirectory(workspace: Path, registry: ToolRegistry) -> None:
    (workspace / "pkg").mkdir()
    (workspace / "pkg" / "mod.py").write_text("", encoding="utf-8")

    entries = json.loads(_run(registry, "list_files", path="pkg"))

    assert entries[0]["name"] == "mod.py"
    assert entries[0]["size"] == 0


def test_list_files_failures(workspace: Path, registry: ToolRegistry) -> None:
    (workspace / "file.txt").write_text("", encoding="utf-8")

    assert _run(registry, "list_files", path="nope") == "does not exist"
    assert _run(registry, "list_files", path="file.txt") == "not a directory"


def test_list_files_keeps_entries_that_cannot_be_stat(workspace: Path, registry: ToolRegistry) -> None:
    (workspace / "ok.txt").write_text("fine", encoding="utf-8")
    (workspace / "dangling").symlink_to(workspace / "gone.txt")

    entries = {entry["name"]: entry for entry in json.loads(_run(registry, "list_files"))}

    assert entries["dangling"] == {"name": "dangling", "type": "file"}
    assert entries["ok.txt"]["size"] == 4


def test_list_files_survives_stat_errors(workspace: Path, registry: ToolRegistry, monkeypatch: pytest.MonkeyPatch) -> None:
    (workspace / "good.txt").write_text("abc", encoding="utf-8")
    (workspace / "broken.txt").write_text("abc", encoding="utf-8")
    original_stat = Path.stat

    def _flaky_stat(self: Path, *args: Any, **kwargs: Any) -> os.stat_result:
        if self.name == "broken.txt":
            raise PermissionError("denied")
        return original_stat(self, *args, **kwargs)

    monkeypatch.setattr(Path, "stat", _flaky_stat)

    entries = {entry["name"]: entry for entry in json.loads(_run(registry, "list_files"))}

    assert entries["broken.txt"] == {"name": "broken.txt", "type": "file"}
    assert entries["good.txt"]["size"] == 3


def test_write_file_creates_parents_and_reports_size(workspace: Path, registry: ToolRegistry) -> None:
    result = _run(registry, "write_file", path="src/deep/hello.txt", content="héllo")

    assert result == "wrote 5 characters (6 bytes) to src/deep/hello.txt"
    assert (workspace / "src" / "deep" / "hello.txt").read_bytes() == "héllo".encode()


def test_write_file_refuses_existing_file_without_overwrite(workspace: Path, registry: ToolRegistry) -> None:
    target = workspace / "keep.txt"
    target.write_text("original", encoding="utf-8")

    assert _run(registry, "write_file", path="keep.txt", content="new") == "exists and overwrite is false"
    assert _run(registry, "write_file", path="keep.txt", content="new", overwrite=False) == (
        "exists and overwrite is false"
    )
    assert target.read_text(encoding="utf-8") == "original"


def test_write_file_overwrite_replaces_contents_exactly(workspace: Path, registry: ToolRegistry) -> None:
    target = workspace / "replace.txt"
    target.write_text("a much longer original body", encoding="utf-8")

    _run(registry, "write_file", path="replace.txt", content="short", overwrite=True)

    assert target.read_text(encoding="utf-8") == "short"


def test_write_file_overwrite_must_be_a_real_boolean(workspace: Path, registry: ToolRegistry) -> None:
    target = workspace / "keep.txt"
    target.write_text("original", encoding="utf-8")

    result = _run(registry, "write_file", path="keep.txt", content="new", overwrite="yes")

    assert result.startswith("invalid arguments")
    assert target.read_text(encoding="utf-8") == "original"


def test_write_file_refuses_directory_target(workspace: Path, registry: ToolRegistry) -> None:
    (workspace / "dir").mkdir()

    assert _run(registry, "write_file", path="dir", content="x", overwrite=True) == "is a directory"


@pytest.mark.parametrize("name", [".env", ".env.local", "pyproject.toml", "package.json", "sub/requirements.txt"])
def test_write_file_blocks_sensitive_and_manifest_files(workspace: Path, registry: ToolRegistry, name: str) -> None:
    assert _run(registry, "write_file", path=name, content="x", overwrite=True) == "sensitive file blocked"
    assert not (workspace / name).exists()


def test_write_file_reports_os_errors_as_text(workspace: Path, registry: ToolRegistry) -> None:
    (workspace / "blocker").write_text("", encoding="utf-8")

    result = _run(registry, "write_file", path="blocker/child.txt", content="x")

    assert result.startswith("error writing file")


def test_write_file_rejects_content_that_cannot_be_encoded(workspace: Path, registry: ToolRegistry) -> None:
    outcome = registry.execute("write_file", {"path": "s.txt", "content": "a\ud800b"})

    assert outcome is not None
    assert outcome.failure is ToolFailure.INVALID_ARGUMENTS
    assert outcome.render().startswith("invalid arguments")
    assert not (workspace / "s.txt").exists()


@pytest.mark.parametrize(
    "content",
    ["", "plain text", "line one\nline two\n", "windows\r\nendings\r\n", "tabs\tand unicode ✓ 中文", "trailing spaces   "],
)
def test_write_then_read_round_trip(workspace: Path, registry: ToolRegistry, content: str) -> None:
    _run(registry, "write_file", path="round/trip.txt", content=content)

    assert _run(registry, "read_file", path="round/trip.txt") == content
    assert (workspace / "round" / "trip.txt").read_bytes() == content.encode("utf-8")
