"""
Pipeline assembler — turn validated options into an ordered step plan.

Pure: no filesystem access, no processes. Any problem found here is a
configuration error and is raised before a single step runs.

The order is fixed. Structural steps come first; the dependency tool
runs once the sources exist; version control runs last so the initial
commit contains the whole tree.

    name:check → root:create → app:core → pop:database → webpack:config
    → webpack:install → docker:files → dep:init → vcs:<kind>
"""

from __future__ import annotations

import logging

from stampede.adapters.languages.go import dep_init_step
from stampede.adapters.languages.node import package_install_step
from stampede.adapters.vcs.git import VcsInitStep
from stampede.core.config.loader import ToolsConfig
from stampede.core.engine.context import RunContext
from stampede.core.engine.step import FuncStep, MkdirStep, Step, WriteFilesStep
from stampede.core.errors import UnknownDialectError
from stampede.core.models.options import AVAILABLE_DIALECTS, Dialect, NewOptions, check_name
from stampede.core.models.result import StepResult
from stampede.core.services.generators.app import generate_app_files
from stampede.core.services.generators.database import generate_database_files
from stampede.core.services.generators.dockerfile import generate_dockerfile
from stampede.core.services.generators.dockerignore import generate_dockerignore
from stampede.core.services.generators.webpack import generate_webpack_files

logger = logging.getLogger(__name__)


def _name_check_step(name: str) -> Step:
    def _check(ctx: RunContext) -> StepResult:
        check_name(name)
        return StepResult.success("name:check", output=name)

    return FuncStep("name:check", _check, description=f"Validate application name {name!r}")


def assemble(options: NewOptions, tools: ToolsConfig | None = None) -> list[Step]:
    """Build the ordered step list for a new application.

    Args:
        options: Validated options.
        tools: External executables (defaults: dep, git, bzr, npm on PATH).

    Returns:
        Steps in execution order.

    Raises:
        ConfigurationError: options fail re-validation (forbidden or empty
            name, unknown dialect).
    """
    tools = tools or ToolsConfig()

    check_name(options.name)
    if options.db_type is not None and options.db_type not in AVAILABLE_DIALECTS:
        raise UnknownDialectError(str(options.db_type), AVAILABLE_DIALECTS)

    steps: list[Step] = [
        _name_check_step(options.name),
        MkdirStep(
            "root:create",
            ".",
            exist_ok=options.force,
            description="Create the application directory",
        ),
        WriteFilesStep(
            "app:core",
            generate_app_files(options),
            description="Write the core application files",
        ),
    ]

    if options.with_database:
        steps.append(
            WriteFilesStep(
                "pop:database",
                generate_database_files(Dialect(options.db_type), options.name),
                description=f"Write database.yml for {options.db_type}",
            )
        )

    if options.with_webpack:
        steps.append(
            WriteFilesStep(
                "webpack:config",
                generate_webpack_files(options.name),
                description="Write the asset pipeline",
            )
        )
        if not options.skip_asset_install:
            steps.append(package_install_step(tools.npm))

    if not options.skip_docker:
        steps.append(
            WriteFilesStep(
                "docker:files",
                [
                    generate_dockerfile(
                        with_assets=options.with_webpack,
                        with_dep=options.with_dep,
                        dialect=options.db_type.value if options.with_database else None,
                        api=options.api,
                    ),
                    generate_dockerignore(with_assets=options.with_webpack),
                ],
                description="Write Dockerfile and .dockerignore",
            )
        )

    if options.with_dep:
        steps.append(dep_init_step(tools.dep, verbose=options.verbose))

    if options.with_vcs:
        executable = getattr(tools, options.vcs.value)
        steps.append(VcsInitStep(options.vcs, executable=executable))

    logger.debug("Assembled %d steps: %s", len(steps), ", ".join(s.name for s in steps))
    return steps


def describe(steps: list[Step]) -> list[dict[str, str]]:
    """Name and description of each step, for plan previews."""
    return [{"name": s.name, "description": s.description} for s in steps]
