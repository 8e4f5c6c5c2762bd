"""
Domain models — Pydantic types for the generator.

All models are re-exported here for convenient access:

    from stampede.core.models import NewOptions, StepResult, GeneratedFile
"""

from stampede.core.models.options import (
    AVAILABLE_DIALECTS,
    AVAILABLE_VCS,
    Dialect,
    NewOptions,
    VcsKind,
)
from stampede.core.models.result import StepResult
from stampede.core.models.template import GeneratedFile

__all__ = [
    # options.py
    "AVAILABLE_DIALECTS",
    "AVAILABLE_VCS",
    "Dialect",
    # template.py
    "GeneratedFile",
    "NewOptions",
    # result.py
    "StepResult",
    "VcsKind",
]
