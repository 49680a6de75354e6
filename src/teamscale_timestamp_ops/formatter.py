from __future__ import annotations

from teamscale_timestamp_core.errors import FormatError
from teamscale_timestamp_core.models import OutputTimestamp, ResolvedBranch, RevisionInfo


def format_timestamp(branch: ResolvedBranch, revision: RevisionInfo) -> OutputTimestamp:
    """Build ``<branch>:<epoch millis>``; the commit time is truncated to whole seconds."""
    name = branch.name.strip()
    if not name:
        raise FormatError("Refusing to emit a timestamp with an empty branch name")
    if revision.commit_timestamp is None:
        raise FormatError(f"No commit time known for revision {revision.revision_id}")
    millis = int(revision.commit_timestamp.timestamp()) * 1000
    return OutputTimestamp(branch=name, timestamp_millis=millis, value=f"{name}:{millis}")
