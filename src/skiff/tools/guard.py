"""Sandbox path resolution and per-operation file policies.

Every filesystem tool routes its path argument through :func:`resolve` before
touching the disk. The resolver only enforces containment; the read and write
tools layer the name, extension and size rules below on top of it.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from pathlib import Path, PurePath

from .results import ToolFailure

READ_EXTENSIONS = frozenset({
    # Docs and plain text
    ".txt",
    ".md",
    ".markdown",
    ".rst",
    ".adoc",
    ".log",
    ".csv",
    ".tsv",
    # Config and data
    ".json",
    ".jsonl",
    ".yaml",
    ".yml",
    ".toml",
    ".ini",
    ".cfg",
    ".conf",
    ".xml",
    ".lock",
    # Web
    ".html",
    ".htm",
    ".css",
    ".scss",
    ".svg",
    ".js",
    ".mjs",
    ".cjs",
    ".jsx",
    ".ts",
    ".tsx",
    ".vue",
    # Source code
    ".py",
    ".pyi",
    ".sh",
    ".bash",
    ".zsh",
    ".sql",
    ".go",
    ".rs",
    ".java",
    ".kt",
    ".c",
    ".h",
    ".cc",
    ".cpp",
    ".hpp",
    ".cs",
    ".rb",
    ".php",
    ".swift",
    ".lua",
    ".r",
})

SENSITIVE_PATTERNS = (
    ".env*",
    "*.pem",
    "*.key",
    "*.p12",
    "*.pfx",
    "id_rsa*",
    "id_dsa*",
    "id_ecdsa*",
    "id_ed25519*",
    "credentials*",
    "secrets.*",
    ".npmrc",
    ".pypirc",
    ".netrc",
)

MANIFEST_PATTERNS = (
    "pyproject.toml",
    "setup.py",
    "setup.cfg",
    "requirements*.txt",
    "pipfile",
    "pipfile.lock",
    "poetry.lock",
    "uv.lock",
    "package.json",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
)


@dataclass(frozen=True)
class ResolvedPath:
    """An untrusted path normalized against the sandbox root."""

    absolute_path: Path
    within_sandbox: bool
    root: Path

    @property
    def relative(self) -> str:
        """Return the path relative to the root, for messages."""
        if not self.within_sandbox:
            return str(self.absolute_path)
        return self.absolute_path.relative_to(self.root).as_posix() or "."


@dataclass(frozen=True)
class Denied:
    """A path the resolver refused."""

    failure: ToolFailure

    @property
    def message(self) -> str:
        return self.failure.value


def locate(root: Path | str, relative_path: str) -> ResolvedPath:
    """Normalize ``relative_path`` under ``root`` with symlinks and ``..`` resolved.

    Raises:
        OSError: if the filesystem cannot be queried while resolving.
        RuntimeError: on symlink loops (older interpreters).
    """
    root_abs = Path(root).resolve()
    candidate = (root_abs / relative_path).resolve()
    within = candidate == root_abs or candidate.is_relative_to(root_abs)
    return ResolvedPath(absolute_path=candidate, within_sandbox=within, root=root_abs)


def resolve(root: Path | str, relative_path: str) -> ResolvedPath | Denied:
    """Resolve ``relative_path`` under ``root``, denying anything outside it."""
    if not isinstance(relative_path, str) or not relative_path.strip() or "\x00" in relative_path:
        return Denied(ToolFailure.INVALID_PATH)
    try:
        resolved = locate(root, relative_path)
    except (OSError, RuntimeError):
        return Denied(ToolFailure.ACCESS_DENIED)
    if not resolved.within_sandbox:
        return Denied(ToolFailure.INVALID_PATH)
    return resolved


def _matches(name: str, patterns: tuple[str, ...]) -> bool:
    lowered = name.lower()
    return any(fnmatch.fnmatchcase(lowered, pattern) for pattern in patterns)


def is_sensitive(path: PurePath | str, *, for_write: bool = False) -> bool:
    """Return True if the file name is blocked for the given operation."""
    name = PurePath(path).name
    if _matches(name, SENSITIVE_PATTERNS):
        return True
    return for_write and _matches(name, MANIFEST_PATTERNS)


def extension_allowed(path: PurePath | str) -> bool:
    """Return True if the file may be read; extensionless files are allowed."""
    suffix = PurePath(path).suffix.lower()
    return not suffix or suffix in READ_EXTENSIONS


def within_size_limit(size: int, limit: int) -> bool:
    """Return True if ``size`` is readable; the limit itself is inclusive."""
    return size <= limit
