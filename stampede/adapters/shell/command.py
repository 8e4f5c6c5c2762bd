"""
Process launcher — run one external command and capture its output.

This is the only place stampede calls ``subprocess``. Every invocation
is bounded by a timeout so a hung tool cannot wedge the ``new`` command.
Failures never raise: they come back as a ``CommandOutput`` with a
non-zero return code and an error message.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from stampede.adapters.base import CommandOutput

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600.0

# Conventional shell exit code for "command not found"
_NOT_FOUND = 127


def is_available(executable: str) -> bool:
    """Whether ``executable`` is on PATH (or is an existing path)."""
    return shutil.which(executable) is not None


def run_command(
    argv: Sequence[str],
    cwd: str | Path,
    env: Mapping[str, str] | None = None,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> CommandOutput:
    """Run ``argv`` in ``cwd`` with stdout and stderr merged.

    Args:
        argv: Executable followed by its arguments. Never run through a shell.
        cwd: Absolute working directory.
        env: Extra environment variables layered over ``os.environ``.
        timeout: Seconds before the process is killed.

    Returns:
        CommandOutput; ``ok`` is True only for exit code 0.
    """
    args = list(argv)
    result = CommandOutput(argv=args, cwd=str(cwd))
    run_env = {**os.environ, **env} if env else None

    logger.debug("Executing: %s (cwd=%s)", result.rendered, cwd)
    start = time.monotonic()

    try:
        proc = subprocess.run(
            args,
            cwd=cwd,
            env=run_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        result.returncode = -1
        result.output = _decode(e.output)
        result.error = f"Command timed out after {timeout}s"
    except FileNotFoundError:
        result.returncode = _NOT_FOUND
        result.error = f"Executable not found: {args[0]}"
    except OSError as e:
        result.returncode = _NOT_FOUND
        result.error = f"Command execution error: {e}"
    else:
        result.returncode = proc.returncode
        result.output = proc.stdout.strip()
        if proc.returncode != 0:
            result.error = f"Command exited with code {proc.returncode}"

    result.duration_ms = int((time.monotonic() - start) * 1000)
    return result


def _decode(raw: bytes | str | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace").strip()
    return raw.strip()
