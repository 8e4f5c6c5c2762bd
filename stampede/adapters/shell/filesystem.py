"""
Disk overlay — the wet-run implementation of ``Overlay``.

Operations pass straight through to the real filesystem below the root
and to a real process launcher. Paths are still checked against the
root, including symlinks that would lead out of it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from stampede.adapters.base import CommandOutput, Overlay
from stampede.adapters.shell.command import DEFAULT_TIMEOUT, run_command
from stampede.core.errors import PathEscapeError

logger = logging.getLogger(__name__)


class DiskOverlay(Overlay):
    """Real filesystem and process overlay.

    Args:
        root: Directory every path is relative to. It does not have to
            exist yet; the root creation step makes it.
        command_timeout: Default timeout for external commands, seconds.
    """

    def __init__(self, root: str | Path, command_timeout: float = DEFAULT_TIMEOUT):
        super().__init__(root)
        self._timeout = command_timeout

    @property
    def mode(self) -> str:
        return "wet"

    @property
    def command_timeout(self) -> float:
        return self._timeout

    def resolve(self, path: str) -> Path:
        target = super().resolve(path)
        # symlinks anywhere along the existing part of the path may point elsewhere
        if not target.resolve().is_relative_to(self.root.resolve()):
            raise PathEscapeError(str(path), str(self.root))
        return target

    # ── Operations ──────────────────────────────────────────────

    def write(self, path: str, content: str, overwrite: bool = True) -> None:
        target = self.resolve(path)
        if target.exists() and not overwrite:
            raise FileExistsError(f"File exists: {self.relative(path)}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        logger.debug("Wrote %d bytes to %s", len(content), target)

    def read(self, path: str) -> str:
        return self.resolve(path).read_text(encoding="utf-8")

    def exists(self, path: str) -> bool:
        return self.resolve(path).exists()

    def is_dir(self, path: str) -> bool:
        return self.resolve(path).is_dir()

    def mkdir(self, path: str, exist_ok: bool = True) -> None:
        target = self.resolve(path)
        target.mkdir(parents=True, exist_ok=exist_ok)
        logger.debug("Directory created: %s", target)

    def listdir(self, path: str = ".") -> list[str]:
        return sorted(p.name for p in self.resolve(path).iterdir())

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
        workdir = self.resolve(cwd)
        if not workdir.is_dir():
            return CommandOutput(
                argv=[name, *args],
                cwd=self.relative(cwd),
                returncode=1,
                error=f"Working directory does not exist: {self.relative(cwd)}",
            )

        result = run_command(
            [name, *args],
            cwd=workdir,
            env=env,
            timeout=timeout if timeout is not None else self._timeout,
        )
        result.cwd = self.relative(cwd)
        if not result.ok:
            return result

        missing = []
        for declared in creates:
            rel = self.relative(declared)
            if self.resolve(rel).exists():
                result.created.append(rel)
            else:
                missing.append(rel)
        if missing:
            result.returncode = 1
            result.error = (
                f"{result.rendered} exited 0 but did not create: {', '.join(missing)}"
            )
        return result
