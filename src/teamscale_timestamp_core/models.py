"""Data model shared by VCS detection, adapters, CI resolver and coordinator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class VcsKind(str, Enum):
    GIT = "git"
    SVN = "svn"
    TFVC = "tfvc"


@dataclass(frozen=True)
class RevisionInfo:
    """Revision, commit time and optional branch reported by a VCS adapter."""
    vcs: VcsKind
    revision_id: str  # commit hash, SVN revision number or TFVC changeset id
    commit_timestamp: datetime  # always timezone-aware
    branch_hint: Optional[str] = None


@dataclass(frozen=True)
class CiDetectionResult:
    """Branch recovered from build server environment variables, if any."""
    branch: Optional[str] = None
    platform: Optional[str] = None
    variable: Optional[str] = None

    @property
    def found(self) -> bool:
        return bool(self.branch)


class BranchProvenance(str, Enum):
    USER_OVERRIDE = "user-override"
    VCS_METADATA = "vcs-metadata"
    CI_ENVIRONMENT = "ci-environment"


@dataclass(frozen=True)
class ResolvedBranch:
    name: str
    provenance: BranchProvenance
    source: str  # e.g. "--branch", "git symbolic-ref", "CircleCI"


@dataclass(frozen=True)
class OutputTimestamp:
    """The value for Teamscale's ``?t=`` parameter."""
    branch: str
    timestamp_millis: int
    value: str

    def __str__(self) -> str:
        return self.value
