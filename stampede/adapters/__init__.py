"""Adapters — the filesystem/process overlays steps run against.

Public re-exports for convenient access.
"""

from stampede.adapters.base import CommandOutput, Overlay
from stampede.adapters.memory import RecordingOverlay
from stampede.adapters.shell.filesystem import DiskOverlay

__all__ = [
    "CommandOutput",
    "DiskOverlay",
    "Overlay",
    "RecordingOverlay",
]
