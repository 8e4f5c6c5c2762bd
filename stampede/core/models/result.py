"""
Step results — the execution contract between the runner and steps.

Steps return a ``StepResult``; the runner collects them in order into a
``PipelineResult``. A failed result always names its step and carries a
short error kind so callers can tell a broken template write from a
failing external tool.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ErrorKind = Literal["io", "command", "verification", "cancelled", "validation"]


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class StepResult(BaseModel):
    """Outcome of running one step.

    ``files`` lists the paths (relative to the run root) the step claims
    to have produced. The runner verifies each of them after an ``ok``
    result, so a successful pipeline implies every planned artifact
    exists.
    """

    step: str
    status: Literal["ok", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    files: list[str] = Field(default_factory=list)
    commands: list[str] = Field(default_factory=list)
    output: str = ""
    error: str | None = None
    error_kind: ErrorKind | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(
        cls,
        step: str,
        files: list[str] | None = None,
        output: str = "",
        **kwargs: Any,
    ) -> StepResult:
        """Create a success result."""
        return cls(
            step=step,
            status="ok",
            files=list(files or []),
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        step: str,
        error: str,
        kind: ErrorKind = "io",
        **kwargs: Any,
    ) -> StepResult:
        """Create a failure result."""
        return cls(
            step=step,
            status="failed",
            error=error,
            error_kind=kind,
            **kwargs,
        )
