"""Filesystem tool factories."""

from __future__ import annotations

import json
import os
import stat
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

from loguru import logger

from ...agent.context import Context
from ..guard import Denied, ResolvedPath, extension_allowed, is_sensitive, resolve, within_size_limit
from ..registry import ToolDescriptor
from ..results import ToolFailure, ToolOutcome
from .shared import ListFilesInput, ReadFileInput, WriteFileInput

READ_DESCRIPTION = (
    "Read the contents of a given relative file path. Use this when you want to see what's inside a file. "
    "Do not use this with directory names."
)
LIST_DESCRIPTION = (
    "List files and directories at a given relative path. If no path is provided, lists the project root. "
    "File entries include size in bytes and last modified time."
)
WRITE_DESCRIPTION = (
    "Write text content to a relative file path, creating parent directories as needed. "
    "Set overwrite to true to replace a file that already exists."
)


@dataclass(frozen=True)
class FileEntry:
    """One row of a directory listing; size and modified are set for files only."""

    name: str
    type: str
    size: int | None = None
    modified: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {key: value for key, value in asdict(self).items() if value is not None}


def _stat_entry(path: Path) -> os.stat_result | None:
    try:
        return path.stat()
    except OSError:
        return None


def _is_dir_entry(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def _build_entry(entry: os.DirEntry[str]) -> FileEntry:
    if _is_dir_entry(entry):
        return FileEntry(name=entry.name, type="directory")
    info = _stat_entry(Path(entry.path))
    if info is None:
        return FileEntry(name=entry.name, type="file")
    modified = datetime.fromtimestamp(info.st_mtime, tz=timezone.utc).isoformat()
    return FileEntry(name=entry.name, type="file", size=info.st_size, modified=modified)


def _blocked(requested: str, resolved: ResolvedPath, *, for_write: bool) -> bool:
    return is_sensitive(requested, for_write=for_write) or is_sensitive(resolved.absolute_path, for_write=for_write)


def read_file(context: Context, params: ReadFileInput) -> ToolOutcome:
    resolved = resolve(context.workspace_path, params.path)
    if isinstance(resolved, Denied):
        return ToolOutcome.fail(resolved.failure)
    if _blocked(params.path, resolved, for_write=False):
        return ToolOutcome.fail(ToolFailure.SENSITIVE_FILE)

    file_path = resolved.absolute_path
    try:
        info = file_path.stat()
    except FileNotFoundError:
        return ToolOutcome.fail(ToolFailure.NOT_FOUND)
    except PermissionError:
        return ToolOutcome.fail(ToolFailure.ACCESS_DENIED)
    except OSError as exc:
        logger.warning("read_file stat failed path={} error={}", resolved.relative, exc)
        return ToolOutcome.fail(ToolFailure.READ_ERROR, exc.strerror or str(exc))

    if stat.S_ISDIR(info.st_mode):
        return ToolOutcome.fail(ToolFailure.IS_DIRECTORY)
    if not stat.S_ISREG(info.st_mode):
        return ToolOutcome.fail(ToolFailure.ACCESS_DENIED)
    if not extension_allowed(file_path):
        return ToolOutcome.fail(ToolFailure.EXTENSION_NOT_ALLOWED)
    if not within_size_limit(info.st_size, context.settings.max_read_bytes):
        return ToolOutcome.fail(ToolFailure.TOO_LARGE)

    try:
        data = file_path.read_bytes()
    except PermissionError:
        return ToolOutcome.fail(ToolFailure.ACCESS_DENIED)
    except OSError as exc:
        logger.warning("read_file failed path={} error={}", resolved.relative, exc)
        return ToolOutcome.fail(ToolFailure.READ_ERROR, exc.strerror or str(exc))
    return ToolOutcome.ok(data.decode("utf-8", errors="replace"))


def list_files(context: Context, params: ListFilesInput) -> ToolOutcome:
    resolved = resolve(context.workspace_path, params.path)
    if isinstance(resolved, Denied):
        return ToolOutcome.fail(resolved.failure)

    dir_path = resolved.absolute_path
    if not dir_path.exists():
        return ToolOutcome.fail(ToolFailure.NOT_FOUND)
    if not dir_path.is_dir():
        return ToolOutcome.fail(ToolFailure.NOT_DIRECTORY)

    try:
        with os.scandir(dir_path) as entries:
            rows = [_build_entry(entry).to_dict() for entry in entries]
    except PermissionError:
        return ToolOutcome.fail(ToolFailure.ACCESS_DENIED)
    except OSError as exc:
        logger.warning("list_files failed path={} error={}", resolved.relative, exc)
        return ToolOutcome.fail(ToolFailure.LIST_ERROR, exc.strerror or str(exc))
    return ToolOutcome.ok(json.dumps(rows, ensure_ascii=False))


def write_file(context: Context, params: WriteFileInput) -> ToolOutcome:
    resolved = resolve(context.workspace_path, params.path)
    if isinstance(resolved, Denied):
        return ToolOutcome.fail(resolved.failure)
    if _blocked(params.path, resolved, for_write=True):
        return ToolOutcome.fail(ToolFailure.SENSITIVE_FILE)

    file_path = resolved.absolute_path
    if file_path.is_dir():
        return ToolOutcome.fail(ToolFailure.IS_DIRECTORY)
    if file_path.exists() and params.overwrite is not True:
        return ToolOutcome.fail(ToolFailure.EXISTS_NO_OVERWRITE)

    try:
        data = params.content.encode("utf-8")
    except UnicodeEncodeError as exc:
        return ToolOutcome.fail(ToolFailure.INVALID_ARGUMENTS, f"content is not valid UTF-8 text: {exc.reason}")
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(data)
    except PermissionError:
        return ToolOutcome.fail(ToolFailure.ACCESS_DENIED)
    except OSError as exc:
        logger.warning("write_file failed path={} error={}", resolved.relative, exc)
        return ToolOutcome.fail(ToolFailure.WRITE_ERROR, exc.strerror or str(exc))
    return ToolOutcome.ok(f"wrote {len(params.content)} characters ({len(data)} bytes) to {resolved.relative}")


def create_read_tool(context: Context) -> ToolDescriptor:
    """Create the read tool bound to the workspace context."""
    return ToolDescriptor(
        name="read_file",
        description=READ_DESCRIPTION,
        input_model=ReadFileInput,
        handler=lambda params: read_file(context, params),
    )


def create_list_tool(context: Context) -> ToolDescriptor:
    """Create the list tool bound to the workspace context."""
    return ToolDescriptor(
        name="list_files",
        description=LIST_DESCRIPTION,
        input_model=ListFilesInput,
        handler=lambda params: list_files(context, params),
    )


def create_write_tool(context: Context) -> ToolDescriptor:
    """Create the write tool bound to the workspace context."""
    return ToolDescriptor(
        name="write_file",
        description=WRITE_DESCRIPTION,
        input_model=WriteFileInput,
        handler=lambda params: write_file(context, params),
    )
