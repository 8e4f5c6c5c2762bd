"""
New-application options — the validated input of the ``new`` command.

The CLI collects raw flag values and hands them to ``NewOptions.build``,
which validates them and returns an immutable options record. Nothing
downstream re-parses user input.
"""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from stampede.core.errors import (
    ForbiddenNameError,
    InvalidNameError,
    MissingNameError,
    UnknownDialectError,
    UnknownVcsError,
)


class Dialect(StrEnum):
    """Supported database backends, in the order error messages list them."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    COCKROACH = "cockroach"
    SQLITE3 = "sqlite3"


class VcsKind(StrEnum):
    GIT = "git"
    BZR = "bzr"
    NONE = "none"


AVAILABLE_DIALECTS: list[str] = [d.value for d in Dialect]
AVAILABLE_VCS: list[str] = [v.value for v in VcsKind]

DEFAULT_DIALECT = Dialect.POSTGRES

# Names that would shadow the tool itself or resolve to a parent directory.
FORBIDDEN_NAMES = frozenset({"stampede", ".", ".."})

_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def check_name(name: str | None) -> str:
    """Validate an application name and return it stripped.

    Raises:
        MissingNameError: name is empty.
        ForbiddenNameError: name is reserved.
        InvalidNameError: name contains path separators or odd characters.
    """
    name = (name or "").strip()
    if not name:
        raise MissingNameError()
    if name.lower() in FORBIDDEN_NAMES:
        raise ForbiddenNameError(name)
    if not _NAME_RE.match(name):
        raise InvalidNameError(
            name, "use letters, digits, '.', '_' or '-' and start with a letter or digit"
        )
    return name


def parse_dialect(value: str | None) -> Dialect | None:
    """Map a ``--db-type`` value to a Dialect. Empty or ``none`` → None."""
    if value is None:
        return None
    raw = value.strip()
    if raw == "" or raw.lower() == "none":
        return None
    try:
        return Dialect(raw)
    except ValueError:
        raise UnknownDialectError(raw, AVAILABLE_DIALECTS) from None


def parse_vcs(value: str | None) -> VcsKind:
    """Map a ``--vcs`` value to a VcsKind. Empty → none."""
    raw = (value or "none").strip() or "none"
    try:
        return VcsKind(raw)
    except ValueError:
        raise UnknownVcsError(raw, AVAILABLE_VCS) from None


class NewOptions(BaseModel):
    """Immutable, validated configuration for one ``new`` invocation.

    Construct through :meth:`build` so every invariant is checked; direct
    construction is reserved for code that has already validated its input.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    module: str = ""
    db_type: Dialect | None = DEFAULT_DIALECT
    api: bool = False
    vcs: VcsKind = VcsKind.GIT
    skip_pop: bool = False
    skip_webpack: bool = False
    skip_asset_install: bool = False
    skip_docker: bool = False
    with_dep: bool = False
    verbose: bool = False
    force: bool = False

    @classmethod
    def build(
        cls,
        name: str | None,
        db_type: str | None = DEFAULT_DIALECT.value,
        vcs: str | None = VcsKind.GIT.value,
        module: str | None = None,
        **flags: bool,
    ) -> NewOptions:
        """Validate raw CLI values and return an options record.

        Name is checked first, then dialect, then VCS kind, so the user
        sees the same error the CLI layer would report.
        """
        checked = check_name(name)
        dialect = parse_dialect(db_type)
        kind = parse_vcs(vcs)
        return cls(
            name=checked,
            module=(module or "").strip() or checked,
            db_type=dialect,
            vcs=kind,
            **flags,
        )

    @property
    def with_database(self) -> bool:
        return not self.skip_pop and self.db_type is not None

    @property
    def with_webpack(self) -> bool:
        # API-only apps have no views, so nothing to bundle
        return not self.skip_webpack and not self.api

    @property
    def with_vcs(self) -> bool:
        return self.vcs != VcsKind.NONE
