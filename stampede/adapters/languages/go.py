"""
Go toolchain steps — dependency vendoring with ``dep``.

``dep init`` writes the manifest and lock file and populates ``vendor/``
itself, so the step only declares those artifacts and lets the overlay
check (wet) or record (dry) them.
"""

from __future__ import annotations

from stampede.core.engine.step import CommandStep, Step, ensure_tool_step

DEP_MANIFEST = "Gopkg.toml"
DEP_LOCK = "Gopkg.lock"
VENDOR_DIR = "vendor/"

DEP_INSTALL_ARGS = ["go", "install", "github.com/golang/dep/cmd/dep@latest"]


def dep_init_step(executable: str = "dep", verbose: bool = False) -> Step:
    """Vendor the app's dependencies with ``dep init``."""
    args = ["init"]
    if verbose:
        args.append("-v")
    return CommandStep(
        "dep:init",
        executable,
        args,
        creates=[DEP_MANIFEST, DEP_LOCK, VENDOR_DIR],
        description="Vendor dependencies with dep",
    )


def install_dep_step(executable: str = "dep") -> Step:
    """Pre-flight: make sure ``dep`` is installed, installing it with go if not."""
    return ensure_tool_step(executable, check_args=["version"], install=DEP_INSTALL_ARGS)
