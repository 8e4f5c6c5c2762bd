"""
Shared test fixtures and configuration.
"""

import logging
import os
import stat
import textwrap
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch):
    """Keep a developer's ~/.stampede.yml and STAMPEDE_* variables out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in list(os.environ):
        if var.startswith("STAMPEDE_"):
            monkeypatch.delenv(var)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handlers installed by setup_logging (the CLI calls it on every run)."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch) -> Path:
    """An empty current directory to generate applications in."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def make_tool(tmp_path: Path):
    """Write a fake executable shell script and return its path.

    Usage::

        dep = make_tool("dep", '''
            touch Gopkg.toml Gopkg.lock
            mkdir -p vendor
        ''')
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make(name: str, body: str) -> str:
        script = bin_dir / name
        script.write_text("#!/bin/sh\n" + textwrap.dedent(body).lstrip("\n"))
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


@pytest.fixture
def fake_dep(make_tool) -> str:
    """A ``dep`` stand-in that answers ``version`` and vendors on ``init``."""
    return make_tool("dep", """
        case "$1" in
          version)
            echo "dep: v0.5.4"
            ;;
          init)
            echo '[prune]' > Gopkg.toml
            echo '# lock' > Gopkg.lock
            mkdir -p vendor/github.com/example
            echo "vendored" > vendor/github.com/example/README
            echo "Using ^1.0.0 as constraint for direct dep github.com/example"
            ;;
          *)
            echo "unknown command: $1" >&2
            exit 2
            ;;
        esac
    """)


@pytest.fixture
def fake_npm(make_tool) -> str:
    """An ``npm`` stand-in that creates node_modules/ on install."""
    return make_tool("npm", """
        mkdir -p node_modules/.bin
        echo "added 42 packages"
    """)


@pytest.fixture
def git_identity(tmp_path: Path, monkeypatch):
    """Commit identity and an empty global config for real git runs."""
    gitconfig = tmp_path / "gitconfig"
    gitconfig.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for role in ("AUTHOR", "COMMITTER"):
        monkeypatch.setenv(f"GIT_{role}_NAME", "Stampede Tests")
        monkeypatch.setenv(f"GIT_{role}_EMAIL", "tests@example.com")
