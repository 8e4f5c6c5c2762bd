"""
Tests for overlays — recording (dry) and disk (wet) — and the process launcher.
"""

import os
import sys
from pathlib import Path

import pytest

from stampede.adapters import CommandOutput, DiskOverlay, RecordingOverlay
from stampede.adapters.shell.command import is_available, run_command
from stampede.core.errors import CommandRejectedError, PathEscapeError

# ── Path handling ───────────────────────────────────────────────


class TestRelativePaths:
    """Both overlays normalize paths against their root."""

    @pytest.fixture(params=["dry", "wet"])
    def overlay(self, request, tmp_path: Path):
        root = tmp_path / "app"
        if request.param == "dry":
            return RecordingOverlay(root)
        return DiskOverlay(root)

    def test_normalizes(self, overlay):
        assert overlay.relative("a/./b/../c.txt") == "a/c.txt"
        assert overlay.relative(".") == "."
        assert overlay.relative("") == "."

    def test_root_resolution(self, overlay, tmp_path: Path):
        assert overlay.resolve(".") == tmp_path / "app"
        assert overlay.resolve("actions/app.go") == tmp_path / "app" / "actions" / "app.go"

    def test_absolute_path_escapes(self, overlay):
        with pytest.raises(PathEscapeError):
            overlay.relative("/etc/passwd")

    def test_parent_path_escapes(self, overlay):
        for path in ("..", "../sibling", "a/../../b"):
            with pytest.raises(PathEscapeError):
                overlay.relative(path)

    def test_write_outside_root_escapes(self, overlay):
        with pytest.raises(PathEscapeError):
            overlay.write("../evil.txt", "x")


# ── RecordingOverlay ────────────────────────────────────────────


class TestRecordingOverlay:
    """Dry-run overlay: everything in memory."""

    def test_starts_empty(self, tmp_path: Path):
        overlay = RecordingOverlay(tmp_path)
        # even an existing real directory is not visible
        assert not overlay.exists(".")
        assert overlay.files == {}
        assert overlay.mode == "dry"

    def test_write_records_and_creates_parents(self, tmp_path: Path):
        overlay = RecordingOverlay(tmp_path / "app")
        overlay.write("actions/app.go", "package actions\n")

        assert overlay.read("actions/app.go") == "package actions\n"
        assert overlay.is_dir("actions")
        assert overlay.is_dir(".")
        assert overlay.listdir(".") == ["actions"]
        assert not (tmp_path / "app").exists()

    def test_overwrite_refused(self, tmp_path: Path):
        overlay = RecordingOverlay(tmp_path)
        overlay.write("a.txt", "1")
        with pytest.raises(FileExistsError):
            overlay.write("a.txt", "2", overwrite=False)
        overlay.write("a.txt", "3")
        assert overlay.read("a.txt") == "3"

    def test_read_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            RecordingOverlay(tmp_path).read("nope.txt")

    def test_mkdir_exclusive(self, tmp_path: Path):
        overlay = RecordingOverlay(tmp_path)
        overlay.mkdir(".", exist_ok=False)
        with pytest.raises(FileExistsError):
            overlay.mkdir(".", exist_ok=False)
        overlay.mkdir(".")

    def test_file_is_not_a_directory(self, tmp_path: Path):
        overlay = RecordingOverlay(tmp_path)
        overlay.write("a", "x")
        with pytest.raises(NotADirectoryError):
            overlay.write("a/b.txt", "y")
        with pytest.raises(FileExistsError):
            overlay.mkdir("a")

    def test_directory_is_not_a_file(self, tmp_path: Path):
        overlay = RecordingOverlay(tmp_path)
        overlay.mkdir("vendor")
        with pytest.raises(IsADirectoryError):
            overlay.write("vendor", "x")

    def test_listdir_nested(self, tmp_path: Path):
        overlay = RecordingOverlay(tmp_path)
        overlay.write("assets/js/application.js", "")
        overlay.write("assets/css/application.scss", "")
        assert overlay.listdir("assets") == ["css", "js"]
        with pytest.raises(FileNotFoundError):
            overlay.listdir("missing")

    def test_command_recorded(self, tmp_path: Path):
        overlay = RecordingOverlay(tmp_path)
        overlay.mkdir(".")
        out = overlay.run_command(".", "dep", ["init"], creates=["Gopkg.toml", "vendor/"])

        assert out.ok
        assert out.simulated
        assert out.rendered == "dep init"
        assert out.created == ["Gopkg.toml", "vendor"]
        assert overlay.exists("Gopkg.toml")
        assert overlay.is_dir("vendor")
        assert [c.rendered for c in overlay.commands] == ["dep init"]

    def test_command_keeps_recorded_content(self, tmp_path: Path):
        overlay = RecordingOverlay(tmp_path)
        overlay.write("package.json", "{}\n")
        out = overlay.run_command(
            ".", "npm", ["install"], creates=["package.json", "package-lock.json"]
        )

        assert out.created == ["package.json", "package-lock.json"]
        assert overlay.read("package.json") == "{}\n"
        assert overlay.read("package-lock.json") == ""

    def test_command_needs_existing_cwd(self, tmp_path: Path):
        overlay = RecordingOverlay(tmp_path)
        out = overlay.run_command(".", "dep", ["init"])
        assert not out.ok
        assert "does not exist" in out.error

    def test_reject_policy(self, tmp_path: Path):
        overlay = RecordingOverlay(tmp_path, command_policy="reject")
        overlay.mkdir(".")
        with pytest.raises(CommandRejectedError, match="git init"):
            overlay.run_command(".", "git", ["init"])

    def test_unknown_policy(self, tmp_path: Path):
        with pytest.raises(ValueError):
            RecordingOverlay(tmp_path, command_policy="maybe")


# ── DiskOverlay ─────────────────────────────────────────────────


class TestDiskOverlay:
    """Wet-run overlay: real disk and real processes."""

    def test_write_and_read(self, tmp_path: Path):
        overlay = DiskOverlay(tmp_path / "app")
        overlay.write("actions/app.go", "package actions\n")
        assert (tmp_path / "app" / "actions" / "app.go").read_text() == "package actions\n"
        assert overlay.read("actions/app.go") == "package actions\n"
        assert overlay.listdir(".") == ["actions"]
        assert overlay.mode == "wet"

    def test_overwrite_refused(self, tmp_path: Path):
        overlay = DiskOverlay(tmp_path)
        overlay.write("a.txt", "1")
        with pytest.raises(FileExistsError):
            overlay.write("a.txt", "2", overwrite=False)
        assert overlay.read("a.txt") == "1"

    def test_mkdir_exclusive(self, tmp_path: Path):
        overlay = DiskOverlay(tmp_path / "app")
        overlay.mkdir(".", exist_ok=False)
        assert (tmp_path / "app").is_dir()
        with pytest.raises(FileExistsError):
            overlay.mkdir(".", exist_ok=False)

    def test_symlink_escape(self, tmp_path: Path):
        outside = tmp_path / "outside"
        outside.mkdir()
        root = tmp_path / "app"
        root.mkdir()
        os.symlink(outside, root / "link")

        overlay = DiskOverlay(root)
        with pytest.raises(PathEscapeError):
            overlay.write("link/file.txt", "x")
        assert not (outside / "file.txt").exists()

    def test_run_command(self, tmp_path: Path):
        overlay = DiskOverlay(tmp_path)
        out = overlay.run_command(".", sys.executable, ["-c", "print('hello')"])
        assert out.ok
        assert out.output == "hello"
        assert not out.simulated

    def test_run_command_missing_cwd(self, tmp_path: Path):
        overlay = DiskOverlay(tmp_path / "missing")
        out = overlay.run_command(".", sys.executable, ["-c", "pass"])
        assert not out.ok
        assert "does not exist" in out.error

    def test_creates_verified(self, tmp_path: Path):
        overlay = DiskOverlay(tmp_path)
        script = "import pathlib; pathlib.Path('made.txt').write_text('x')"
        out = overlay.run_command(".", sys.executable, ["-c", script], creates=["made.txt"])
        assert out.ok
        assert out.created == ["made.txt"]

    def test_creates_missing(self, tmp_path: Path):
        overlay = DiskOverlay(tmp_path)
        out = overlay.run_command(
            ".", sys.executable, ["-c", "pass"], creates=["Gopkg.toml", "vendor/"]
        )
        assert not out.ok
        assert out.returncode == 1
        assert "did not create: Gopkg.toml, vendor" in out.error


# ── Process launcher ────────────────────────────────────────────


class TestRunCommand:
    """shell.command.run_command — never raises."""

    def test_success(self, tmp_path: Path):
        out = run_command([sys.executable, "-c", "print('ok')"], cwd=tmp_path)
        assert isinstance(out, CommandOutput)
        assert out.ok
        assert out.returncode == 0
        assert out.output == "ok"

    def test_stderr_merged(self, tmp_path: Path):
        script = "import sys; sys.stderr.write('oops\\n'); sys.exit(3)"
        out = run_command([sys.executable, "-c", script], cwd=tmp_path)
        assert not out.ok
        assert out.returncode == 3
        assert "oops" in out.output
        assert out.error == "Command exited with code 3"

    def test_undecodable_output(self, tmp_path: Path, make_tool):
        tool = make_tool("latin1", "printf 'caf\\351\\n'\n")
        out = run_command([tool], cwd=tmp_path)
        assert out.ok
        assert out.output == "caf\ufffd"

    def test_missing_executable(self, tmp_path: Path):
        out = run_command(["definitely-not-a-real-tool-xyz"], cwd=tmp_path)
        assert out.returncode == 127
        assert "Executable not found" in out.error

    def test_timeout(self, tmp_path: Path):
        out = run_command(
            [sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2
        )
        assert not out.ok
        assert out.returncode == -1
        assert "timed out" in out.error

    def test_env_layered(self, tmp_path: Path):
        script = "import os; print(os.environ['STAMPEDE_PROBE'], bool(os.environ.get('PATH')))"
        out = run_command([sys.executable, "-c", script], cwd=tmp_path, env={"STAMPEDE_PROBE": "1"})
        assert out.output == "1 True"

    def test_is_available(self):
        assert is_available(sys.executable)
        assert not is_available("definitely-not-a-real-tool-xyz")

    def test_rendered_quotes(self):
        out = CommandOutput(argv=["git", "commit", "-m", "Initial commit"])
        assert out.rendered == "git commit -m 'Initial commit'"
