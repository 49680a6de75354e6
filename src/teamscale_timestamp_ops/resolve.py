"""
resolve.py - End-to-end timestamp resolution.

VCS detection -> VCS adapter -> CI detection -> branch coordinator -> formatter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from teamscale_timestamp_core.ci import detect_branch
from teamscale_timestamp_core.config import TimestampConfig
from teamscale_timestamp_core.env import EnvReader
from teamscale_timestamp_core.errors import BranchError
from teamscale_timestamp_core.models import (
    BranchProvenance,
    CiDetectionResult,
    OutputTimestamp,
    ResolvedBranch,
    RevisionInfo,
)
from teamscale_timestamp_core.vcs import (
    CommandRunner,
    GitAdapter,
    GitRepository,
    RepositoryHandle,
    detect,
    resolve_revision,
    run_command,
)

from .branch import resolve_branch
from .formatter import format_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionResult:
    handle: RepositoryHandle
    revision: RevisionInfo
    ci: CiDetectionResult
    branch: ResolvedBranch
    output: OutputTimestamp


def resolve_timestamp(
    path: Path,
    *,
    branch_override: Optional[str] = None,
    tfs_pat: Optional[str] = None,
    env: Optional[EnvReader] = None,
    config: Optional[TimestampConfig] = None,
    ceiling: Optional[Path] = None,
    runner: CommandRunner = run_command,
    transport: Optional[httpx.BaseTransport] = None,
) -> ResolutionResult:
    """Compute the ``?t=`` value for the checkout containing ``path``.

    Raises a TimestampError subclass on any failure; nothing is produced in
    that case.
    """
    env = env or EnvReader()
    config = config or TimestampConfig()

    logger.debug(f"Detecting version control system for {path}")
    handle = detect(path, env=env, ceiling=ceiling)

    logger.debug("Trying to determine revision and timestamp")
    revision = resolve_revision(
        handle,
        env,
        branch_override=branch_override,
        personal_access_token=tfs_pat,
        tfvc_settings=config.tfvc,
        runner=runner,
        transport=transport,
    )
    logger.debug(
        f"Found {revision.vcs.value} revision {revision.revision_id} "
        f"at {revision.commit_timestamp.isoformat()}"
    )

    logger.debug("Trying to determine branch")
    ci_result = detect_branch(env)
    try:
        branch = resolve_branch(branch_override, revision, ci_result, config.branch.precedence)
    except BranchError:
        branch = _guess_git_branch(handle, config, runner)
        if branch is None:
            raise

    output = format_timestamp(branch, revision)
    logger.debug(f"Resolved {output.value} (branch from {branch.source})")
    return ResolutionResult(handle=handle, revision=revision, ci=ci_result, branch=branch, output=output)


def _guess_git_branch(
    handle: RepositoryHandle,
    config: TimestampConfig,
    runner: CommandRunner,
) -> Optional[ResolvedBranch]:
    if not config.branch.guess_from_git or not isinstance(handle, GitRepository):
        return None
    logger.debug("Trying to guess the branch from local Git branches containing HEAD")
    guessed = GitAdapter(runner=runner).guess_branch(handle)
    if guessed is None:
        return None
    return ResolvedBranch(guessed, BranchProvenance.VCS_METADATA, "git branch --contains")


def write_revision_txt(output: OutputTimestamp, revision_txt_file: Path) -> None:
    """Write a revision.txt that upload tooling can read the timestamp from."""
    revision_txt_file.parent.mkdir(parents=True, exist_ok=True)
    revision_txt_file.write_text(f"timestamp: {output.value}", encoding="utf-8")
    logger.debug(f"Wrote {revision_txt_file}")
