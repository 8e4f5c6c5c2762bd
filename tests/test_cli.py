"""
Tests for the CLI — global options and the ``new`` command.
"""

import json
import textwrap
from pathlib import Path

import yaml
from click.testing import CliRunner

from stampede.main import cli


def _config(directory: Path, **tools: str) -> Path:
    """Write a config file pointing the external tools at fakes."""
    path = directory.parent / "stampede-test.yml"
    path.write_text(yaml.safe_dump({"tools": tools}))
    return path


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "scaffold new Go web applications" in result.output
        assert "new" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_new_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["new", "--help"])
        assert result.exit_code == 0
        assert "--db-type" in result.output
        assert "--skip-pop" in result.output


# ── Input validation ────────────────────────────────────────────


class TestNewValidation:
    """Invalid input fails before anything is written."""

    def test_missing_name(self, workdir: Path):
        result = CliRunner().invoke(cli, ["new"])
        assert result.exit_code == 1
        assert "you must enter a name for your new application" in result.output
        assert list(workdir.iterdir()) == []

    def test_forbidden_name(self, workdir: Path):
        result = CliRunner().invoke(cli, ["new", "stampede"])
        assert result.exit_code == 1
        assert "name stampede is not allowed, try a different application name" in result.output
        assert list(workdir.iterdir()) == []

    def test_unknown_dialect(self, workdir: Path):
        result = CliRunner().invoke(cli, ["new", "coke", "--db-type=a"])
        assert result.exit_code == 1
        assert (
            'unknown dialect "a" expecting one of postgres, mysql, cockroach, sqlite3'
            in result.output
        )
        assert not (workdir / "coke").exists()

    def test_unknown_vcs(self, workdir: Path):
        result = CliRunner().invoke(cli, ["new", "coke", "--vcs=svn"])
        assert result.exit_code == 1
        assert 'unknown vcs "svn" expecting one of git, bzr, none' in result.output

    def test_name_with_separator(self, workdir: Path):
        result = CliRunner().invoke(cli, ["new", "../coke", "--vcs=none"])
        assert result.exit_code == 1
        assert "invalid application name" in result.output
        assert not (workdir.parent / "coke").exists()

    def test_missing_config_file(self, workdir: Path):
        result = CliRunner().invoke(cli, ["--config", "nope.yml", "new", "coke"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_json_error(self, workdir: Path):
        result = CliRunner().invoke(cli, ["new", "--json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error"] == "you must enter a name for your new application"


# ── Generation ──────────────────────────────────────────────────


class TestNewGeneration:
    """Successful runs."""

    def test_nominal(self, workdir: Path):
        result = CliRunner().invoke(
            cli, ["new", "coke", "--skip-pop", "--skip-webpack", "--vcs=none"]
        )
        assert result.exit_code == 0, result.output

        app = workdir / "coke"
        assert (app / "main.go").is_file()
        assert (app / "actions" / "app.go").is_file()
        assert (app / "go.mod").is_file()
        assert (app / "Dockerfile").is_file()
        assert (app / ".dockerignore").is_file()
        assert not (app / "database.yml").exists()
        assert not (app / "package.json").exists()
        assert not (app / ".git").exists()
        assert "✓ app:core" in result.output
        assert "cd coke && go run ." in result.output

    def test_sqlite3(self, workdir: Path):
        result = CliRunner().invoke(
            cli, ["new", "coke", "--db-type=sqlite3", "--skip-webpack", "--vcs=none"]
        )
        assert result.exit_code == 0, result.output

        config = yaml.safe_load((workdir / "coke" / "database.yml").read_text())
        assert config["development"]["dialect"] == "sqlite3"
        assert config["development"]["database"] == "./coke_development.sqlite"
        assert "CGO_ENABLED=1" in (workdir / "coke" / "Dockerfile").read_text()

    def test_api(self, workdir: Path):
        result = CliRunner().invoke(cli, ["new", "coke", "--api", "--vcs=none"])
        assert result.exit_code == 0, result.output

        app = workdir / "coke"
        assert (app / "database.yml").is_file()
        assert not (app / "templates").exists()
        assert not (app / "package.json").exists()
        assert "renderJSON" in (app / "actions" / "home.go").read_text()

    def test_skip_docker(self, workdir: Path):
        result = CliRunner().invoke(
            cli, ["new", "coke", "--skip-docker", "--skip-webpack", "--vcs=none"]
        )
        assert result.exit_code == 0, result.output
        assert not (workdir / "coke" / "Dockerfile").exists()

    def test_webpack_install(self, workdir: Path, fake_npm: str):
        config = _config(workdir, npm=fake_npm)
        result = CliRunner().invoke(
            cli, ["--config", str(config), "new", "coke", "--skip-pop", "--vcs=none"]
        )
        assert result.exit_code == 0, result.output

        app = workdir / "coke"
        assert (app / "package.json").is_file()
        assert (app / "webpack.config.js").is_file()
        assert (app / "node_modules").is_dir()

    def test_skip_asset_install(self, workdir: Path):
        result = CliRunner().invoke(
            cli, ["new", "coke", "--skip-pop", "--skip-asset-install", "--vcs=none"]
        )
        assert result.exit_code == 0, result.output
        assert (workdir / "coke" / "package.json").is_file()
        assert not (workdir / "coke" / "node_modules").exists()

    def test_with_dep(self, workdir: Path, fake_dep: str):
        config = _config(workdir, dep=fake_dep)
        result = CliRunner().invoke(
            cli,
            ["-c", str(config), "new", "coke", "--with-dep", "--skip-pop",
             "--skip-webpack", "--vcs=none"],
        )
        assert result.exit_code == 0, result.output

        app = workdir / "coke"
        assert (app / "Gopkg.toml").is_file()
        assert (app / "Gopkg.lock").is_file()
        assert (app / "vendor" / "github.com" / "example" / "README").is_file()
        assert not (app / "go.mod").exists()

    def test_module(self, workdir: Path):
        result = CliRunner().invoke(
            cli, ["new", "coke", "--module", "github.com/acme/coke", "--skip-pop",
                  "--skip-webpack", "--vcs=none"],
        )
        assert result.exit_code == 0, result.output
        assert "module github.com/acme/coke" in (workdir / "coke" / "go.mod").read_text()

    def test_config_defaults(self, workdir: Path):
        (workdir / ".stampede.yml").write_text(textwrap.dedent("""\
            new:
              db_type: sqlite3
              vcs: none
        """))
        result = CliRunner().invoke(cli, ["new", "coke", "--skip-webpack"])
        assert result.exit_code == 0, result.output
        assert "sqlite3" in (workdir / "coke" / "database.yml").read_text()
        assert not (workdir / "coke" / ".git").exists()

    def test_flags_override_config(self, workdir: Path):
        (workdir / ".stampede.yml").write_text("new:\n  db_type: sqlite3\n  vcs: none\n")
        result = CliRunner().invoke(cli, ["new", "coke", "--skip-webpack", "--db-type=mysql"])
        assert result.exit_code == 0, result.output
        assert "dialect: mysql" in (workdir / "coke" / "database.yml").read_text()


# ── Existing targets ────────────────────────────────────────────


class TestExistingTarget:
    """Existing directories are refused unless forced."""

    def test_refused(self, workdir: Path):
        (workdir / "coke").mkdir()
        (workdir / "coke" / "keep.txt").write_text("mine")

        result = CliRunner().invoke(cli, ["new", "coke", "--vcs=none"])
        assert result.exit_code == 1
        assert "already exists, use --force to overwrite" in result.output
        assert sorted(p.name for p in (workdir / "coke").iterdir()) == ["keep.txt"]

    def test_second_run_refused(self, workdir: Path):
        args = ["new", "coke", "--skip-pop", "--skip-webpack", "--vcs=none"]
        assert CliRunner().invoke(cli, args).exit_code == 0
        result = CliRunner().invoke(cli, args)
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_force(self, workdir: Path):
        app = workdir / "coke"
        app.mkdir()
        (app / "keep.txt").write_text("mine")
        (app / "main.go").write_text("stale")

        result = CliRunner().invoke(
            cli, ["new", "coke", "--force", "--skip-pop", "--skip-webpack", "--vcs=none"]
        )
        assert result.exit_code == 0, result.output
        assert (app / "keep.txt").read_text() == "mine"
        assert (app / "main.go").read_text() != "stale"

    def test_file_in_the_way(self, workdir: Path):
        (workdir / "coke").write_text("not a directory")
        result = CliRunner().invoke(cli, ["new", "coke", "--force", "--vcs=none"])
        assert result.exit_code == 1
        assert "is not a directory" in result.output


# ── Dry run and failures ────────────────────────────────────────


class TestDryRun:
    """--dry-run reports the plan and writes nothing."""

    def test_writes_nothing(self, workdir: Path):
        result = CliRunner().invoke(cli, ["new", "coke", "--dry-run", "--with-dep"])
        assert result.exit_code == 0, result.output
        assert not (workdir / "coke").exists()
        assert "[dry-run]" in result.output
        assert "Would write:" in result.output
        assert "• database.yml" in result.output
        assert "$ dep init" in result.output
        assert "$ git init -q" in result.output

    def test_json(self, workdir: Path):
        result = CliRunner().invoke(
            cli, ["new", "coke", "--dry-run", "--json", "--vcs=none", "--skip-webpack"]
        )
        assert result.exit_code == 0, result.output

        data = json.loads(result.stdout)
        assert data["name"] == "coke"
        assert data["ok"] is True
        assert "run" not in data
        assert data["dry_run"]["status"] == "ok"
        assert data["plan"][0]["name"] == "name:check"
        assert "main.go" in data["dry_run"]["files"]


class TestStepFailure:
    """A failing wet step stops the run and is reported by name."""

    def test_dep_failure(self, workdir: Path, make_tool):
        dep = make_tool("dep", 'echo "no Go files found"\nexit 1\n')
        config = _config(workdir, dep=dep)
        result = CliRunner().invoke(
            cli,
            ["-c", str(config), "new", "coke", "--with-dep", "--skip-pop",
             "--skip-webpack", "--vcs=none"],
        )
        assert result.exit_code == 1
        assert "step dep:init failed: Command exited with code 1" in result.output
        assert "✗ dep:init" in result.output
        assert "no Go files found" in result.output
        # no rollback: earlier steps stay on disk
        assert (workdir / "coke" / "main.go").is_file()

    def test_dep_failure_json(self, workdir: Path, make_tool):
        dep = make_tool("dep", "exit 3\n")
        config = _config(workdir, dep=dep)
        result = CliRunner().invoke(
            cli,
            ["-c", str(config), "new", "coke", "--with-dep", "--skip-pop",
             "--skip-webpack", "--vcs=none", "--json"],
        )
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error"] == "step dep:init failed: Command exited with code 3"
        assert data["run"]["failed_step"] == "dep:init"
        assert data["run"]["mode"] == "wet"

    def test_missing_tool(self, workdir: Path):
        config = _config(workdir, dep="definitely-not-a-real-tool-xyz")
        result = CliRunner().invoke(
            cli,
            ["-c", str(config), "new", "coke", "--with-dep", "--skip-pop",
             "--skip-webpack", "--vcs=none"],
        )
        assert result.exit_code == 1
        assert "Executable not found: definitely-not-a-real-tool-xyz" in result.output
