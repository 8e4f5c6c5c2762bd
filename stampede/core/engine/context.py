"""
Run context — the state threaded through one pipeline execution.

A context is created fresh by the runner for every run and dropped at
the end. It owns nothing global: the overlay, environment and
cancellation token all come from the caller.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from stampede.adapters.base import CommandOutput, Overlay
from stampede.core.errors import PipelineCancelledError

logger = logging.getLogger(__name__)


class CancelToken:
    """Cooperative cancellation flag, safe to set from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "pipeline cancelled") -> None:
        self._reason = reason
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise PipelineCancelledError(self._reason)


@dataclass
class RunContext:
    """Everything a step needs: where to work, how, and whether to stop."""

    overlay: Overlay
    env: dict[str, str] = field(default_factory=dict)
    verbose: bool = False
    command_timeout: float | None = None
    cancel: CancelToken = field(default_factory=CancelToken)
    log: logging.Logger = field(default=logger)

    @property
    def root(self) -> Path:
        return self.overlay.root

    @property
    def mode(self) -> str:
        return self.overlay.mode

    def check_cancelled(self) -> None:
        """Raise ``PipelineCancelledError`` if the run was cancelled."""
        self.cancel.raise_if_cancelled()

    def run(
        self,
        name: str,
        args: Sequence[str] = (),
        cwd: str = ".",
        creates: Sequence[str] = (),
    ) -> CommandOutput:
        """Run an external command through the overlay with this run's env."""
        self.check_cancelled()
        result = self.overlay.run_command(
            cwd,
            name,
            args,
            env=self.env or None,
            creates=creates,
            timeout=self.command_timeout,
        )
        if self.verbose and result.output:
            for line in result.output.splitlines():
                self.log.info("  │ %s", line)
        return result
