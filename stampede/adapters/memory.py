"""
Recording overlay — the dry-run implementation of ``Overlay``.

Nothing here reads or writes real storage. Every write, mkdir and
command is recorded in memory, and ``exists`` consults only what was
recorded earlier in the same run. A fresh overlay therefore starts with
an empty tree: not even the root exists until a step creates it.

External commands follow an explicit policy:

    record  (default)  log the invocation, report a simulated success and
                       mark the command's declared ``creates`` paths present
    reject             raise ``CommandRejectedError``
"""

from __future__ import annotations

import posixpath
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Literal

from stampede.adapters.base import CommandOutput, Overlay
from stampede.core.errors import CommandRejectedError

CommandPolicy = Literal["record", "reject"]


class RecordingOverlay(Overlay):
    """In-memory overlay used for dry runs and tests."""

    def __init__(self, root: str | Path, command_policy: CommandPolicy = "record"):
        super().__init__(root)
        if command_policy not in ("record", "reject"):
            raise ValueError(f"Unknown command policy: {command_policy!r}")
        self._policy: CommandPolicy = command_policy
        self._files: dict[str, str] = {}
        self._dirs: set[str] = set()
        self._commands: list[CommandOutput] = []

    @property
    def mode(self) -> str:
        return "dry"

    @property
    def command_policy(self) -> CommandPolicy:
        return self._policy

    @property
    def files(self) -> dict[str, str]:
        """Recorded files: relative path → content."""
        return dict(self._files)

    @property
    def directories(self) -> list[str]:
        return sorted(self._dirs)

    @property
    def commands(self) -> list[CommandOutput]:
        """Every command invocation seen so far, in order."""
        return list(self._commands)

    # ── Operations ──────────────────────────────────────────────

    def write(self, path: str, content: str, overwrite: bool = True) -> None:
        rel = self.relative(path)
        if rel in self._dirs:
            raise IsADirectoryError(f"Is a directory: {rel}")
        if rel in self._files and not overwrite:
            raise FileExistsError(f"File exists: {rel}")
        self._add_parents(rel)
        self._files[rel] = content

    def read(self, path: str) -> str:
        rel = self.relative(path)
        if rel not in self._files:
            raise FileNotFoundError(f"No such file: {rel}")
        return self._files[rel]

    def exists(self, path: str) -> bool:
        rel = self.relative(path)
        return rel in self._files or rel in self._dirs

    def is_dir(self, path: str) -> bool:
        return self.relative(path) in self._dirs

    def mkdir(self, path: str, exist_ok: bool = True) -> None:
        rel = self.relative(path)
        if rel in self._files:
            raise FileExistsError(f"File exists: {rel}")
        if rel in self._dirs and not exist_ok:
            raise FileExistsError(f"Directory exists: {rel}")
        self._add_parents(rel)
        self._dirs.add(rel)

    def listdir(self, path: str = ".") -> list[str]:
        rel = self.relative(path)
        if rel not in self._dirs:
            raise FileNotFoundError(f"No such directory: {rel}")
        entries = {
            posixpath.basename(p)
            for p in (*self._files, *self._dirs)
            if p != "." and posixpath.dirname(p) == ("" if rel == "." else rel)
        }
        return sorted(entries)

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
        rel_cwd = self.relative(cwd)
        argv = [name, *args]
        result = CommandOutput(argv=argv, cwd=rel_cwd, simulated=True)

        if self._policy == "reject":
            raise CommandRejectedError(result.rendered)

        if rel_cwd not in self._dirs:
            result.returncode = 1
            result.error = f"Working directory does not exist: {rel_cwd}"
            self._commands.append(result)
            return result

        for declared in creates:
            if declared.endswith("/"):
                self.mkdir(declared.rstrip("/"))
            elif self.relative(declared) not in self._files:
                # placeholder: the real content is produced by the tool
                self.write(declared, "")
            result.created.append(self.relative(declared))

        result.output = f"[dry-run] {result.rendered}"
        self._commands.append(result)
        return result

    # ── Helpers ─────────────────────────────────────────────────

    def _add_parents(self, rel: str) -> None:
        parent = posixpath.dirname(rel)
        while parent:
            if parent in self._files:
                raise NotADirectoryError(f"Not a directory: {parent}")
            self._dirs.add(parent)
            parent = posixpath.dirname(parent)
        self._dirs.add(".")
