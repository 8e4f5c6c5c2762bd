"""
Error taxonomy — everything the generator can raise.

Configuration errors are raised before any step runs and are safe to
retry after fixing the input. Execution errors are raised after a wet
run stopped part way; the target tree is left as it was.
"""

from __future__ import annotations


class StampedeError(Exception):
    """Base class for all stampede errors."""


# ── Configuration (pre-execution) ───────────────────────────────


class ConfigurationError(StampedeError):
    """Invalid user input or configuration, detected before execution."""


class MissingNameError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("you must enter a name for your new application")


class ForbiddenNameError(ConfigurationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"name {name} is not allowed, try a different application name"
        )


class InvalidNameError(ConfigurationError):
    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"invalid application name {name!r}: {reason}")


class UnknownDialectError(ConfigurationError):
    def __init__(self, value: str, known: list[str]) -> None:
        self.value = value
        self.known = list(known)
        super().__init__(
            f'unknown dialect "{value}" expecting one of {", ".join(known)}'
        )


class UnknownVcsError(ConfigurationError):
    def __init__(self, value: str, known: list[str]) -> None:
        self.value = value
        self.known = list(known)
        super().__init__(
            f'unknown vcs "{value}" expecting one of {", ".join(known)}'
        )


class TargetExistsError(ConfigurationError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"{path} already exists, use --force to overwrite")


class ConfigFileError(ConfigurationError):
    """Raised when a stampede config file is unreadable or invalid."""


# ── Execution ───────────────────────────────────────────────────


class StepExecutionError(StampedeError):
    """A named step failed during a run."""

    def __init__(self, step: str, message: str, output: str = "", result=None) -> None:
        self.step = step
        self.cause = message
        self.output = output
        self.result = result  # PipelineResult of the failed run, when known
        super().__init__(f"step {step} failed: {message}")


class PathEscapeError(StampedeError):
    """A step tried to touch a path outside the run root.

    Always a programming error in a step. The runner never converts it
    into a failed result.
    """

    def __init__(self, path: str, root: str) -> None:
        self.path = path
        self.root = root
        super().__init__(f"path {path!r} escapes root {root}")


class CommandRejectedError(StampedeError):
    """A dry run was configured to refuse external commands."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"external command rejected in dry run: {command}")


class PipelineCancelledError(StampedeError):
    """The run's cancellation token was set."""

    def __init__(self, message: str = "pipeline cancelled") -> None:
        super().__init__(message)
