"""
VCS steps — initialize a repository and make the initial commit.

Supports git and bzr through their CLIs. The step must run after every
file-writing step: it refuses to initialize an empty working tree so the
initial commit is never empty.

Regenerating into an existing checkout (``new --force``) reuses the
repository: init is skipped and the commit only happens when the
regenerated files differ from what is already committed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from stampede.adapters.base import CommandOutput
from stampede.core.engine.context import RunContext
from stampede.core.engine.step import Step
from stampede.core.models.options import VcsKind
from stampede.core.models.result import StepResult

logger = logging.getLogger(__name__)

INITIAL_COMMIT_MESSAGE = "Initial commit"


@dataclass(frozen=True)
class VcsCommands:
    """Argument lists for one VCS, each run after the executable."""

    metadata_dir: str
    init: list[str]
    add: list[str]
    commit: list[str]
    # prints one line per pending change, nothing on a clean tree
    status: list[str]


_COMMANDS: dict[VcsKind, VcsCommands] = {
    VcsKind.GIT: VcsCommands(
        metadata_dir=".git/",
        init=["init", "-q"],
        add=["add", "."],
        commit=["commit", "-q", "-m", INITIAL_COMMIT_MESSAGE],
        status=["status", "--porcelain"],
    ),
    VcsKind.BZR: VcsCommands(
        metadata_dir=".bzr/",
        init=["init", "-q"],
        add=["add", "-q"],
        commit=["commit", "-q", "-m", INITIAL_COMMIT_MESSAGE],
        status=["status", "--short"],
    ),
}


class VcsInitStep(Step):
    """Initialize version control in the app root and commit everything.

    Args:
        kind: git or bzr.
        executable: Override for the VCS binary (defaults to the kind name).
    """

    def __init__(self, kind: VcsKind | str, executable: str | None = None):
        kind = VcsKind(kind)
        if kind not in _COMMANDS:
            raise ValueError(f"No VCS commands for {kind.value!r}")
        super().__init__(f"vcs:{kind.value}", description=f"Initialize {kind.value} repository")
        self.kind = kind
        self.executable = executable or kind.value

    def run(self, ctx: RunContext) -> StepResult:
        entries = ctx.overlay.listdir(".") if ctx.overlay.is_dir(".") else []
        if not entries:
            return StepResult.failure(
                self.name,
                error=f"refusing to initialize {self.kind.value} in an empty working tree",
                kind="validation",
            )

        vcs = _COMMANDS[self.kind]
        metadata_dir = ctx.overlay.relative(vcs.metadata_dir)
        existing = ctx.overlay.is_dir(metadata_dir)

        commands: list[str] = []
        outputs: list[str] = []

        def _run(args: list[str], creates: Sequence[str] = ()) -> CommandOutput:
            out = ctx.run(self.executable, args, creates=creates)
            commands.append(out.rendered)
            if out.output:
                outputs.append(out.output)
            return out

        if not existing:
            out = _run(vcs.init, [vcs.metadata_dir])
            if not out.ok:
                return self._failed(out, commands, outputs)

        out = _run(vcs.add)
        if not out.ok:
            return self._failed(out, commands, outputs)

        pending = True
        if existing:
            status = _run(vcs.status)
            if not status.ok:
                return self._failed(status, commands, outputs)
            pending = bool(status.output.strip())

        if pending:
            out = _run(vcs.commit)
            if not out.ok:
                return self._failed(out, commands, outputs)
        else:
            logger.info("No changes to commit in existing %s repository", self.kind.value)

        logger.debug(
            "%s %s repository in %s (%d entries)",
            "Updated" if existing else "Initialized",
            self.kind.value,
            ctx.root,
            len(entries),
        )
        return StepResult.success(
            self.name,
            files=[metadata_dir],
            output="\n".join(outputs),
            commands=commands,
            metadata={"entries": len(entries), "existing": existing, "committed": pending},
        )

    def _failed(self, out: CommandOutput, commands: list[str], outputs: list[str]) -> StepResult:
        return StepResult.failure(
            self.name,
            error=out.error or f"{out.rendered} failed",
            kind="command",
            commands=commands,
            output="\n".join(outputs),
            metadata={"return_code": out.returncode},
        )
