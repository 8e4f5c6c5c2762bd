"""
CLI command for creating a new application.

Thin wrapper over ``stampede.core.use_cases.new``: collects flags,
validates them into ``NewOptions`` and renders the outcome. Every
stampede error is printed verbatim and exits with status 1.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from stampede.core.models.options import AVAILABLE_DIALECTS, AVAILABLE_VCS


def _fail(message: str, as_json: bool, payload: dict | None = None) -> None:
    if as_json:
        click.echo(json.dumps({**(payload or {}), "error": message}, indent=2))
    else:
        click.secho(f"❌ {message}", fg="red")
    sys.exit(1)


def _print_results(pipeline, verbose: bool) -> None:
    for r in pipeline.results:
        timing = f" ({r.duration_ms}ms)" if r.duration_ms else ""
        if r.ok:
            click.secho(f"   ✓ {r.step}", fg="green", nl=False)
            click.echo(timing)
            if verbose and r.output:
                for line in r.output.split("\n")[:10]:
                    click.echo(f"     │ {line}")
        else:
            click.secho(f"   ✗ {r.step}", fg="red", nl=False)
            click.echo(timing)
            detail = r.output or r.error or ""
            for line in detail.split("\n")[:5]:
                if line:
                    click.echo(f"     │ {line}")


@click.command("new")
@click.argument("name", required=False, default="")
@click.option(
    "--db-type",
    default=None,
    help=f"Database dialect ({', '.join(AVAILABLE_DIALECTS)}) or 'none'.",
)
@click.option("--api", is_flag=True, help="Skip views, templates and assets (API only).")
@click.option("--skip-pop", is_flag=True, help="Skip the database configuration.")
@click.option("--skip-webpack", is_flag=True, help="Skip the asset pipeline.")
@click.option("--skip-asset-install", is_flag=True, help="Write asset files but skip npm install.")
@click.option("--skip-docker", is_flag=True, help="Skip the Dockerfile.")
@click.option("--vcs", default=None, help=f"Version control ({', '.join(AVAILABLE_VCS)}).")
@click.option("--with-dep", is_flag=True, help="Vendor dependencies with dep.")
@click.option("--module", default=None, help="Go module path (default: the app name).")
@click.option("--force", "-f", is_flag=True, help="Generate into an existing directory.")
@click.option("--dry-run", is_flag=True, help="Show what would be generated, write nothing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Show tool output.")
@click.pass_context
def new(
    ctx: click.Context,
    name: str,
    db_type: str | None,
    api: bool,
    skip_pop: bool,
    skip_webpack: bool,
    skip_asset_install: bool,
    skip_docker: bool,
    vcs: str | None,
    with_dep: bool,
    module: str | None,
    force: bool,
    dry_run: bool,
    as_json: bool,
    verbose: bool,
) -> None:
    """Create a new application.

    Examples:

        stampede new coke

        stampede new coke --db-type=sqlite3 --vcs=none

        stampede new coke --api --skip-pop --dry-run
    """
    from stampede.core.config.loader import load_config
    from stampede.core.errors import StampedeError, StepExecutionError
    from stampede.core.models.options import NewOptions
    from stampede.core.observability.logging_config import setup_from_environment
    from stampede.core.use_cases.new import new_app

    obj = ctx.obj or {}
    if verbose and not obj.get("debug"):
        setup_from_environment(verbose=True)

    try:
        config = load_config(obj.get("config_path"))
        options = NewOptions.build(
            name,
            db_type=db_type if db_type is not None else config.new.db_type,
            vcs=vcs if vcs is not None else config.new.vcs,
            module=module,
            api=api,
            skip_pop=skip_pop,
            skip_webpack=skip_webpack,
            skip_asset_install=skip_asset_install,
            skip_docker=skip_docker,
            with_dep=with_dep,
            verbose=verbose,
            force=force,
        )
        result = new_app(options, parent_dir=Path.cwd(), config=config, dry_run=dry_run)
    except StepExecutionError as e:
        pipeline = e.result
        if as_json:
            _fail(str(e), True, {"run": pipeline.to_dict()} if pipeline else None)
        if pipeline is not None:
            click.secho(f"\n⚡ [{pipeline.mode}] {name}", fg="cyan", bold=True)
            _print_results(pipeline, verbose)
            click.echo()
        _fail(str(e), False)
        return
    except StampedeError as e:
        _fail(str(e), as_json)
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    final = result.wet or result.dry
    assert final is not None  # the dry run always happens

    mode_label = "[dry-run] " if result.dry_run_only else ""
    click.secho(f"\n⚡ {mode_label}{options.name} → {result.root}", fg="cyan", bold=True)
    click.echo(f"   Steps: {len(result.plan)}")
    click.echo()
    _print_results(final, verbose)

    if result.dry_run_only:
        click.echo()
        click.secho("   Would write:", fg="white", bold=True)
        for path in final.files:
            click.echo(f"     • {path}")
        if final.commands:
            click.secho("   Would run:", fg="white", bold=True)
            for command in final.commands:
                click.echo(f"     $ {command}")

    click.echo()
    click.secho(
        f"   Result: {len(final.results)}/{len(result.plan)} steps succeeded",
        fg="green",
        bold=True,
    )
    if not result.dry_run_only:
        click.echo(f"   cd {options.name} && go run .")
    click.echo()
