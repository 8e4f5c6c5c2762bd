"""
Steps — the units of work a pipeline is made of.

A step has a name and a ``run(ctx)`` method returning a ``StepResult``.
Steps only talk to the world through ``ctx.overlay`` (or ``ctx.run`` for
external commands), which is what lets the same step run dry or wet.

Steps may raise ``OSError`` or a ``StampedeError``; the runner turns
those into failed results. To create a new step:
    1. Subclass Step and implement ``run``, or
    2. Wrap a plain function in ``FuncStep``, or
    3. Reuse WriteFilesStep / MkdirStep / CommandStep.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from stampede.core.engine.context import RunContext
from stampede.core.models.result import StepResult
from stampede.core.models.template import GeneratedFile


class Step(ABC):
    """Abstract base class for all steps."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description

    @abstractmethod
    def run(self, ctx: RunContext) -> StepResult:
        """Perform the work and report the outcome."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class FuncStep(Step):
    """A step backed by a plain ``fn(ctx) -> StepResult`` function."""

    def __init__(
        self,
        name: str,
        fn: Callable[[RunContext], StepResult],
        description: str = "",
    ):
        super().__init__(name, description)
        self._fn = fn

    def run(self, ctx: RunContext) -> StepResult:
        return self._fn(ctx)


class WriteFilesStep(Step):
    """Write a fixed list of generated files."""

    def __init__(self, name: str, files: Sequence[GeneratedFile], description: str = ""):
        super().__init__(name, description)
        self.files = list(files)

    def run(self, ctx: RunContext) -> StepResult:
        written: list[str] = []
        for f in self.files:
            ctx.check_cancelled()
            ctx.overlay.write(f.path, f.content, overwrite=f.overwrite)
            written.append(ctx.overlay.relative(f.path))
        return StepResult.success(self.name, files=written)


class MkdirStep(Step):
    """Create one directory.

    With ``exist_ok=False`` the creation is exclusive: it fails if the
    directory is already there.
    """

    def __init__(self, name: str, path: str = ".", exist_ok: bool = True, description: str = ""):
        super().__init__(name, description)
        self.path = path
        self.exist_ok = exist_ok

    def run(self, ctx: RunContext) -> StepResult:
        ctx.overlay.mkdir(self.path, exist_ok=self.exist_ok)
        return StepResult.success(self.name, files=[ctx.overlay.relative(self.path)])


class CommandStep(Step):
    """Run one external command; exit 0 is success.

    ``creates`` lists the root-relative paths the command must produce,
    trailing ``/`` for directories.
    """

    def __init__(
        self,
        name: str,
        command: str,
        args: Sequence[str] = (),
        cwd: str = ".",
        creates: Sequence[str] = (),
        description: str = "",
    ):
        super().__init__(name, description)
        self.command = command
        self.args = list(args)
        self.cwd = cwd
        self.creates = list(creates)

    def run(self, ctx: RunContext) -> StepResult:
        out = ctx.run(self.command, self.args, cwd=self.cwd, creates=self.creates)
        if not out.ok:
            return StepResult.failure(
                self.name,
                error=out.error or f"{out.rendered} exited with code {out.returncode}",
                kind="command",
                commands=[out.rendered],
                output=out.output,
                metadata={"return_code": out.returncode},
            )
        return StepResult.success(
            self.name,
            files=out.created,
            output=out.output,
            commands=[out.rendered],
            metadata={"return_code": out.returncode, "simulated": out.simulated},
        )


def ensure_tool_step(
    tool: str,
    check_args: Sequence[str] = ("version",),
    install: Sequence[str] = (),
) -> Step:
    """Pre-flight step: make sure ``tool`` runs, installing it if needed.

    The check runs ``tool *check_args``. When it fails and ``install`` is
    given (an argv, e.g. ``["go", "install", "..."]``) the installer runs
    and the check is repeated. No other retries.
    """

    def _ensure(ctx: RunContext) -> StepResult:
        name = f"ensure:{tool}"
        check = ctx.run(tool, check_args)
        commands = [check.rendered]
        if check.ok:
            return StepResult.success(name, output=check.output, commands=commands)
        if not install:
            return StepResult.failure(
                name, error=f"{tool} is not available: {check.error}",
                kind="command", commands=commands, output=check.output,
            )

        installed = ctx.run(install[0], install[1:])
        commands.append(installed.rendered)
        if not installed.ok:
            return StepResult.failure(
                name, error=f"installing {tool} failed: {installed.error}",
                kind="command", commands=commands, output=installed.output,
            )

        check = ctx.run(tool, check_args)
        commands.append(check.rendered)
        if not check.ok:
            return StepResult.failure(
                name, error=f"{tool} still unavailable after install: {check.error}",
                kind="command", commands=commands, output=check.output,
            )
        return StepResult.success(name, output=check.output, commands=commands)

    return FuncStep(f"ensure:{tool}", _ensure, description=f"Make sure {tool} is installed")
