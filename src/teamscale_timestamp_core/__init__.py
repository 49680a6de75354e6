"""Core of teamscale-timestamp: VCS probing, revision lookup and CI branch detection."""

from .errors import (
    BranchError,
    BranchErrorKind,
    ConfigError,
    FormatError,
    NotAVcsDirectory,
    TimestampError,
    VcsError,
    VcsErrorKind,
)
from .models import (
    BranchProvenance,
    CiDetectionResult,
    OutputTimestamp,
    ResolvedBranch,
    RevisionInfo,
    VcsKind,
)

__all__ = [
    "BranchError",
    "BranchErrorKind",
    "BranchProvenance",
    "CiDetectionResult",
    "ConfigError",
    "FormatError",
    "NotAVcsDirectory",
    "OutputTimestamp",
    "ResolvedBranch",
    "RevisionInfo",
    "TimestampError",
    "VcsError",
    "VcsErrorKind",
    "VcsKind",
]
