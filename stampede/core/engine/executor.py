"""
Engine executor — the central run loop.

The runner takes an ordered list of steps and executes them against one
overlay, strictly in order, stopping at the first failure. There is no
rollback: a failed wet run leaves the target tree as far as it got, and
the failing step's result is reported verbatim.

Flow:
    steps → fresh RunContext → run each step → verify its files → collect results
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from stampede.adapters.base import Overlay
from stampede.adapters.memory import CommandPolicy, RecordingOverlay
from stampede.adapters.shell.command import DEFAULT_TIMEOUT
from stampede.adapters.shell.filesystem import DiskOverlay
from stampede.core.engine.context import CancelToken, RunContext
from stampede.core.engine.step import Step
from stampede.core.errors import (
    ConfigurationError,
    PathEscapeError,
    PipelineCancelledError,
    StampedeError,
    StepExecutionError,
)
from stampede.core.models.result import StepResult

logger = logging.getLogger(__name__)


class RunMode(StrEnum):
    DRY = "dry"
    WET = "wet"


@dataclass
class PipelineResult:
    """Ordered results of one pipeline run."""

    mode: str = RunMode.DRY.value
    root: str = ""
    results: list[StepResult] = field(default_factory=list)
    planned: int = 0

    @property
    def ok(self) -> bool:
        return self.first_failure is None and len(self.results) == self.planned

    @property
    def first_failure(self) -> StepResult | None:
        return next((r for r in self.results if r.failed), None)

    @property
    def failed_step(self) -> str | None:
        failure = self.first_failure
        return failure.step if failure else None

    @property
    def cancelled(self) -> bool:
        failure = self.first_failure
        return failure is not None and failure.error_kind == "cancelled"

    @property
    def files(self) -> list[str]:
        """Every path produced by the run, in step order, without duplicates."""
        return list(dict.fromkeys(p for r in self.results if r.ok for p in r.files))

    @property
    def commands(self) -> list[str]:
        return [c for r in self.results for c in r.commands]

    @property
    def status(self) -> str:
        if self.ok:
            return "ok"
        if self.cancelled:
            return "cancelled"
        return "failed"

    def raise_for_status(self) -> None:
        """Raise ``StepExecutionError`` for the first failed step, if any."""
        failure = self.first_failure
        if failure is not None:
            raise StepExecutionError(
                failure.step, failure.error or "unknown error", failure.output, result=self
            )

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "root": self.root,
            "status": self.status,
            "planned": self.planned,
            "executed": len(self.results),
            "failed_step": self.failed_step,
            "files": self.files,
            "commands": self.commands,
            "results": [r.model_dump(mode="json") for r in self.results],
        }


def make_overlay(
    mode: RunMode | str,
    root: str | Path,
    command_timeout: float = DEFAULT_TIMEOUT,
    command_policy: CommandPolicy = "record",
) -> Overlay:
    """Build the overlay for a run mode."""
    mode = RunMode(mode)
    if mode is RunMode.DRY:
        return RecordingOverlay(root, command_policy=command_policy)
    return DiskOverlay(root, command_timeout=command_timeout)


class Runner:
    """Runs steps in order against one overlay.

    Use ``Runner.dry(root)`` to simulate and ``Runner.wet(root)`` to act.
    Each ``run`` call gets a fresh ``RunContext``; the overlay is reused,
    so a second dry ``run`` on the same runner sees the first one's records.
    """

    def __init__(
        self,
        overlay: Overlay,
        env: dict[str, str] | None = None,
        verbose: bool = False,
        cancel: CancelToken | None = None,
        command_timeout: float | None = None,
    ):
        self._overlay = overlay
        self._env = dict(env or {})
        self._verbose = verbose
        self._cancel = cancel or CancelToken()
        self._command_timeout = command_timeout

    @classmethod
    def dry(
        cls,
        root: str | Path,
        command_policy: CommandPolicy = "record",
        **kwargs,
    ) -> Runner:
        return cls(RecordingOverlay(root, command_policy=command_policy), **kwargs)

    @classmethod
    def wet(
        cls,
        root: str | Path,
        command_timeout: float = DEFAULT_TIMEOUT,
        **kwargs,
    ) -> Runner:
        return cls(DiskOverlay(root, command_timeout=command_timeout), **kwargs)

    @property
    def overlay(self) -> Overlay:
        return self._overlay

    @property
    def cancel(self) -> CancelToken:
        return self._cancel

    def run(self, steps: Sequence[Step]) -> PipelineResult:
        """Execute ``steps`` in order, stopping at the first failure.

        Raises:
            PathEscapeError: a step touched a path outside the root.
        """
        ctx = RunContext(
            overlay=self._overlay,
            env=dict(self._env),
            verbose=self._verbose,
            cancel=self._cancel,
            command_timeout=self._command_timeout,
        )
        report = PipelineResult(
            mode=self._overlay.mode,
            root=str(self._overlay.root),
            planned=len(steps),
        )
        logger.info("Running %d step(s) [%s] in %s", len(steps), report.mode, report.root)

        for step in steps:
            start = time.monotonic()
            if ctx.cancel.cancelled:
                result = StepResult.failure(
                    step.name, error=ctx.cancel.reason or "pipeline cancelled", kind="cancelled"
                )
            else:
                result = _run_step(step, ctx)
            result.duration_ms = int((time.monotonic() - start) * 1000)
            report.results.append(result)

            status_marker = "✓" if result.ok else "✗"
            logger.info(
                "%s %s → %s (%dms)",
                status_marker,
                step.name,
                result.status,
                result.duration_ms,
            )
            if result.failed:
                logger.info("Step %s failed: %s", step.name, result.error)
                break

        return report


def run_pipeline(
    steps: Sequence[Step],
    root: str | Path,
    mode: RunMode | str = RunMode.DRY,
    command_timeout: float = DEFAULT_TIMEOUT,
    command_policy: CommandPolicy = "record",
    **kwargs,
) -> PipelineResult:
    """Run ``steps`` against ``root`` in the given mode.

    Args:
        steps: Ordered steps.
        root: Directory all step paths are relative to.
        mode: 'dry' (record only) or 'wet' (real disk and processes).
        command_timeout: Timeout per external command in wet mode.
        command_policy: What a dry run does with external commands.
        **kwargs: Forwarded to ``Runner`` (env, verbose, cancel).
    """
    overlay = make_overlay(mode, root, command_timeout, command_policy)
    return Runner(overlay, command_timeout=command_timeout, **kwargs).run(steps)


def _run_step(step: Step, ctx: RunContext) -> StepResult:
    """Run one step, converting expected exceptions into a failed result."""
    try:
        result = step.run(ctx)
    except PathEscapeError:
        raise
    except PipelineCancelledError as e:
        return StepResult.failure(step.name, error=str(e), kind="cancelled")
    except ConfigurationError as e:
        return StepResult.failure(step.name, error=str(e), kind="validation")
    except StampedeError as e:
        return StepResult.failure(step.name, error=str(e), kind="command")
    except OSError as e:
        return StepResult.failure(step.name, error=f"Filesystem error: {e}", kind="io")

    result.step = step.name
    if result.failed:
        return result

    missing = [p for p in result.files if not ctx.overlay.exists(p)]
    if missing:
        return StepResult.failure(
            step.name,
            error=f"missing after step: {', '.join(missing)}",
            kind="verification",
            commands=result.commands,
            output=result.output,
        )
    return result
