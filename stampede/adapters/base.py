"""
Overlay base — the filesystem/process capability handed to every step.

Steps never touch ``pathlib`` or ``subprocess`` directly. They go through
an ``Overlay``, which has two implementations:

    RecordingOverlay  (dry run)  records intended writes and commands in memory
    DiskOverlay       (wet run)  writes to disk and launches real processes

So the same step code runs in both modes and never branches on mode.

All path arguments are relative to the overlay root. A path that would
resolve outside the root raises ``PathEscapeError``.
"""

from __future__ import annotations

import os
import posixpath
import shlex
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from stampede.core.errors import PathEscapeError


@dataclass
class CommandOutput:
    """What came back from one external command invocation."""

    argv: list[str]
    cwd: str = "."
    returncode: int = 0
    output: str = ""
    error: str = ""
    simulated: bool = False
    duration_ms: int = 0
    created: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.error

    @property
    def rendered(self) -> str:
        """The command line as a user would type it."""
        return shlex.join(self.argv)


class Overlay(ABC):
    """Abstract filesystem/process capability rooted at one directory."""

    def __init__(self, root: str | Path):
        self._root = Path(os.path.abspath(root))

    @property
    def root(self) -> Path:
        return self._root

    @property
    @abstractmethod
    def mode(self) -> str:
        """'dry' or 'wet' — informational only, steps must not branch on it."""

    # ── Path handling ───────────────────────────────────────────

    def relative(self, path: str | os.PathLike[str]) -> str:
        """Normalize a root-relative path to ``a/b/c`` form ('.' = root).

        Raises:
            PathEscapeError: path is absolute or climbs out of the root.
        """
        raw = os.fspath(path)
        if os.path.isabs(raw) or raw.startswith("/"):
            raise PathEscapeError(raw, str(self._root))
        normalized = posixpath.normpath(raw.replace("\\", "/"))
        if normalized == ".." or normalized.startswith("../"):
            raise PathEscapeError(raw, str(self._root))
        return normalized

    def resolve(self, path: str | os.PathLike[str]) -> Path:
        """Absolute path of a root-relative path."""
        rel = self.relative(path)
        return self._root if rel == "." else self._root / rel

    # ── Operations ──────────────────────────────────────────────

    @abstractmethod
    def write(self, path: str, content: str, overwrite: bool = True) -> None:
        """Write a text file, creating parent directories.

        Raises:
            FileExistsError: file exists and ``overwrite`` is False.
        """

    @abstractmethod
    def read(self, path: str) -> str:
        """Read a text file.

        Raises:
            FileNotFoundError: nothing was written (or exists) at ``path``.
        """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Whether a file or directory exists at ``path``."""

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        """Whether ``path`` is a directory."""

    @abstractmethod
    def mkdir(self, path: str, exist_ok: bool = True) -> None:
        """Create a directory and its parents.

        Raises:
            FileExistsError: directory exists and ``exist_ok`` is False.
        """

    @abstractmethod
    def listdir(self, path: str = ".") -> list[str]:
        """Sorted entry names directly under ``path``."""

    @abstractmethod
    def run_command(
        self,
        cwd: str,
        name: str,
        args: Sequence[str] = (),
        *,
        env: Mapping[str, str] | None = None,
        creates: Sequence[str] = (),
        timeout: float | None = None,
    ) -> CommandOutput:
        """Run an external command in ``cwd`` (root-relative).

        ``creates`` declares the root-relative paths the command is expected
        to produce; a trailing ``/`` marks a directory.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} mode={self.mode!r} root={str(self._root)!r}>"
