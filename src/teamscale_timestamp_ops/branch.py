"""Branch resolution: merge override, VCS hint and CI variables."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from teamscale_timestamp_core.config import BranchPrecedence
from teamscale_timestamp_core.errors import BranchError
from teamscale_timestamp_core.models import (
    BranchProvenance,
    CiDetectionResult,
    ResolvedBranch,
    RevisionInfo,
    VcsKind,
)

logger = logging.getLogger(__name__)

_VCS_SOURCES = {
    VcsKind.GIT: "git symbolic-ref",
    VcsKind.SVN: "svn url",
    VcsKind.TFVC: "tfvc",
}


def resolve_branch(
    override: Optional[str],
    revision: Optional[RevisionInfo],
    ci_result: CiDetectionResult,
    precedence: BranchPrecedence = BranchPrecedence.VCS_FIRST,
) -> ResolvedBranch:
    """Pick the branch from the highest-priority source that has one.

    The override always wins. ``precedence`` orders the VCS hint and the CI
    branch after it. Raises BranchError when no source has a value.
    """
    override = (override or "").strip()
    if override:
        logger.debug(f"Using branch {override} from --branch")
        return ResolvedBranch(override, BranchProvenance.USER_OVERRIDE, "--branch")

    candidates: List[Tuple[Optional[str], BranchProvenance, str]] = []
    vcs = revision.vcs if revision is not None else None
    vcs_hint = revision.branch_hint if revision is not None else None
    candidates.append((vcs_hint, BranchProvenance.VCS_METADATA, _VCS_SOURCES.get(vcs, "vcs")))
    candidates.append((ci_result.branch, BranchProvenance.CI_ENVIRONMENT, ci_result.platform or "ci"))
    if precedence is BranchPrecedence.CI_FIRST:
        candidates.reverse()

    for name, provenance, source in candidates:
        name = (name or "").strip()
        if name:
            logger.debug(f"Using branch {name} from {source}")
            return ResolvedBranch(name, provenance, source)

    raise BranchError(vcs)
