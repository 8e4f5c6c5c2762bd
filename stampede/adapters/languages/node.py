"""
Node.js toolchain steps — install the asset pipeline's packages.
"""

from __future__ import annotations

from stampede.core.engine.step import CommandStep, Step

SUPPORTED_PACKAGE_MANAGERS = ("npm", "yarn", "pnpm")


def package_install_step(executable: str = "npm") -> Step:
    """Install node packages from ``package.json`` into ``node_modules/``.

    ``executable`` may be a path; its base name picks the argument style.
    """
    manager = executable.replace("\\", "/").rsplit("/", 1)[-1]
    args = ["install", "--no-progress"] if manager == "npm" else ["install"]
    return CommandStep(
        "webpack:install",
        executable,
        args,
        creates=["node_modules/"],
        description=f"Install asset packages with {manager}",
    )
