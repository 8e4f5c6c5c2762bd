"""
Generated file model — used by all generators.
"""

from __future__ import annotations

from pydantic import BaseModel


class GeneratedFile(BaseModel):
    """A file produced by a generator.

    Attributes:
        path:      Path relative to the application root, ``/`` separated.
        content:   Full file content.
        overwrite: Whether an existing file may be replaced.
        reason:    Why this file was generated.
    """

    path: str
    content: str
    overwrite: bool = True
    reason: str = ""
