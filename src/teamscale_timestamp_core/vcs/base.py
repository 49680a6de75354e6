"""VCS abstraction base types."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol, Union

from ..models import RevisionInfo, VcsKind


@dataclass(frozen=True)
class GitRepository:
    """Git checkout; ``git_dir`` differs from ``root / '.git'`` for worktrees and submodules."""
    root: Path
    git_dir: Path

    @property
    def kind(self) -> VcsKind:
        return VcsKind.GIT


@dataclass(frozen=True)
class SvnWorkingCopy:
    root: Path

    @property
    def kind(self) -> VcsKind:
        return VcsKind.SVN


@dataclass(frozen=True)
class TfvcWorkspace:
    root: Path
    marker: Optional[Path] = None  # None for server workspaces detected from the build environment

    @property
    def kind(self) -> VcsKind:
        return VcsKind.TFVC


RepositoryHandle = Union[GitRepository, SvnWorkingCopy, TfvcWorkspace]


class VcsAdapter(Protocol):
    """Capability shared by all VCS adapters."""

    def resolve(self, handle) -> RevisionInfo:
        """Read revision id, commit time and branch hint for ``handle``."""
        ...


_FRACTION = re.compile(r"\.(\d+)")


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 date as written by ``svn info`` and the TFS REST API.

    Fractions longer than microseconds (TFS sends 7 digits) are truncated.
    Raises ValueError for anything else.
    """
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
