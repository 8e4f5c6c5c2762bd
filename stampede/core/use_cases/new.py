"""
New use case — create an application from validated options.

This is the top-level orchestrator behind ``stampede new``:

    options → assemble plan → check target → dry run → wet run

The dry run always happens first. It exercises every step against an
in-memory overlay, so ordering mistakes and bad templates surface before
anything touches disk. The wet run only starts once the dry run passed.

Existing targets are refused unless ``force`` is set. With ``force`` the
generator writes into the existing directory and overwrites the files it
generates; other files are left alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from stampede.core.config.loader import StampedeConfig
from stampede.core.engine.context import CancelToken
from stampede.core.engine.executor import PipelineResult, Runner
from stampede.core.errors import ConfigurationError, TargetExistsError
from stampede.core.models.options import NewOptions
from stampede.core.services.assembler import assemble, describe

logger = logging.getLogger(__name__)


@dataclass
class NewAppResult:
    """Result of creating an application."""

    options: NewOptions
    root: Path
    plan: list[dict[str, str]] = field(default_factory=list)
    dry: PipelineResult | None = None
    wet: PipelineResult | None = None

    @property
    def dry_run_only(self) -> bool:
        return self.wet is None

    @property
    def ok(self) -> bool:
        final = self.wet or self.dry
        return final is not None and final.ok

    def to_dict(self) -> dict:
        result: dict = {
            "name": self.options.name,
            "root": str(self.root),
            "ok": self.ok,
            "plan": self.plan,
            "options": self.options.model_dump(mode="json"),
        }
        if self.dry:
            result["dry_run"] = self.dry.to_dict()
        if self.wet:
            result["run"] = self.wet.to_dict()
        return result


def check_target(root: Path, force: bool) -> None:
    """Refuse to generate into an existing path unless forced.

    Raises:
        TargetExistsError: ``root`` exists and ``force`` is False.
        ConfigurationError: ``root`` exists and is not a directory.
    """
    if not root.exists():
        return
    if not root.is_dir():
        raise ConfigurationError(f"{root} exists and is not a directory")
    if not force:
        raise TargetExistsError(str(root))
    logger.warning("Generating into existing directory %s (--force)", root)


def new_app(
    options: NewOptions,
    parent_dir: Path | None = None,
    config: StampedeConfig | None = None,
    dry_run: bool = False,
    env: dict[str, str] | None = None,
    cancel: CancelToken | None = None,
) -> NewAppResult:
    """Create the application ``options.name`` under ``parent_dir``.

    Args:
        options: Validated options.
        parent_dir: Directory the app folder is created in (default: cwd).
        config: Loaded configuration (tool paths, timeout).
        dry_run: Stop after the dry run; nothing is written.
        env: Extra environment for external commands.
        cancel: Token to stop the run between steps.

    Returns:
        NewAppResult with the dry (and, unless ``dry_run``, wet) results.

    Raises:
        ConfigurationError: invalid options or existing target. Nothing
            was written.
        StepExecutionError: a step failed. For a wet failure the target
            directory is left partially populated.
    """
    config = config or StampedeConfig()
    parent = (parent_dir or Path.cwd()).resolve()
    root = parent / options.name

    steps = assemble(options, config.tools)
    check_target(root, options.force)

    result = NewAppResult(options=options, root=root, plan=describe(steps))

    runner_kwargs = {"env": env, "verbose": options.verbose, "cancel": cancel}

    logger.info("Simulating %d steps for %s", len(steps), options.name)
    result.dry = Runner.dry(root, **runner_kwargs).run(steps)
    result.dry.raise_for_status()
    if dry_run:
        return result

    logger.info("Generating %s in %s", options.name, root)
    result.wet = Runner.wet(root, command_timeout=config.command_timeout, **runner_kwargs).run(
        steps
    )
    result.wet.raise_for_status()
    return result
