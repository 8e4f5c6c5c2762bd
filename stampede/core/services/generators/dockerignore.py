"""
.dockerignore generator — keep the Go build context small.

The builder stage only needs sources, templates, public files and the
dependency manifests. Everything the developer machine accumulates next
to them (repositories, local databases, build output) stays out.
"""

from __future__ import annotations

from stampede.core.models.template import GeneratedFile

# repository metadata for every supported VCS
_REPOSITORY = [".git", ".bzr"]

# local state written while running the app in development
_LOCAL = [".env", "*.log", "*.sqlite", "tmp/", "bin/"]

# the Dockerfile never needs itself in the context
_DOCKER = ["Dockerfile", ".dockerignore"]

# rebuilt by the assets stage
_ASSETS = ["node_modules", "public/assets"]


def generate_dockerignore(*, with_assets: bool) -> GeneratedFile:
    """Generate a .dockerignore for the app.

    Args:
        with_assets: Also exclude node packages and bundled assets.
    """
    patterns = [*_REPOSITORY, *_LOCAL, *_DOCKER]
    if with_assets:
        patterns.extend(_ASSETS)
    return GeneratedFile(
        path=".dockerignore",
        content="\n".join(patterns) + "\n",
        reason="Docker build context exclusions",
    )
