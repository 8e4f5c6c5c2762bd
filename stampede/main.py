"""
Stampede — CLI entrypoint.

Usage:
    python -m stampede.main --help
    python -m stampede.main new coke --db-type=sqlite3
"""

from __future__ import annotations

from pathlib import Path

import click

from stampede import __version__
from stampede.core.observability.logging_config import setup_from_environment


@click.group()
@click.version_option(version=__version__, prog_name="stampede")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to .stampede.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Stampede — scaffold new Go web applications."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_from_environment(debug=debug, verbose=verbose, quiet=quiet)


from stampede.ui.cli.new import new  # noqa: E402

cli.add_command(new)


if __name__ == "__main__":
    cli()
