"""Git VCS adapter."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

from ..errors import VcsError, VcsErrorKind
from ..models import RevisionInfo, VcsKind
from .base import GitRepository
from .process import CommandResult, CommandRunner, run_command

logger = logging.getLogger(__name__)

_BRANCH_MARKER = re.compile(r"^\s*[*+]\s*")


class GitAdapter:
    """Git VCS adapter."""

    def __init__(self, runner: CommandRunner = run_command):
        self._runner = runner

    def _git(self, handle: GitRepository, step: str, *args: str) -> CommandResult:
        try:
            # Pin git to the detected repository; no discovery past a broken .git.
            pinned = [f"--git-dir={handle.git_dir}", f"--work-tree={handle.root}"]
            return self._runner(["git", *pinned, *args], handle.root)
        except FileNotFoundError as exc:
            raise VcsError(
                VcsErrorKind.CLIENT_UNAVAILABLE, VcsKind.GIT, step,
                "the git executable was not found",
            ) from exc

    def _unreadable(self, step: str, result: CommandResult) -> VcsError:
        detail = result.stderr.strip() or f"exit code {result.returncode}"
        return VcsError(
            VcsErrorKind.UNREADABLE, VcsKind.GIT, step,
            f"cannot read repository metadata ({detail})",
        )

    def resolve(self, handle: GitRepository) -> RevisionInfo:
        """Get hash, committer time and checked out branch of HEAD."""
        # Get revision (commit hash)
        head = self._git(handle, "read HEAD", "rev-parse", "--verify", "--quiet", "HEAD^{commit}")
        if head.returncode == 1 and not head.stdout.strip():
            raise VcsError(
                VcsErrorKind.NO_COMMITS, VcsKind.GIT, "read HEAD",
                f"the repository at {handle.root} has no commits yet",
            )
        if not head.ok:
            raise self._unreadable("read HEAD", head)
        revision = head.stdout.strip()

        # Get committer timestamp
        shown = self._git(handle, "read commit time", "show", "-s", "--format=%ct", "HEAD")
        if not shown.ok:
            raise self._unreadable("read commit time", shown)
        try:
            seconds = int(shown.stdout.strip())
        except ValueError:
            raise VcsError(
                VcsErrorKind.UNREADABLE, VcsKind.GIT, "read commit time",
                f"unexpected output {shown.stdout.strip()!r}",
            ) from None
        committed = datetime.fromtimestamp(seconds, tz=timezone.utc)

        # Get ref (branch), None when detached
        branch: Optional[str] = None
        ref = self._git(handle, "read branch", "symbolic-ref", "--quiet", "--short", "HEAD")
        if ref.ok:
            branch = ref.stdout.strip() or None
        elif ref.returncode == 1:
            logger.debug(f"HEAD is detached at {revision}")
        else:
            raise self._unreadable("read branch", ref)

        logger.debug(f"Git HEAD {revision} committed {committed.isoformat()} on branch {branch}")
        return RevisionInfo(
            vcs=VcsKind.GIT,
            revision_id=revision,
            commit_timestamp=committed,
            branch_hint=branch,
        )

    def guess_branch(self, handle: GitRepository) -> Optional[str]:
        """Last resort: the single local branch containing HEAD, if unambiguous."""
        result = self._git(handle, "guess branch", "branch", "--contains", "HEAD")
        if not result.ok:
            logger.debug("git branch --contains failed, cannot guess the branch")
            return None
        branches = parse_branch_listing(result.stdout)
        if len(branches) == 1:
            logger.debug(f"Exactly one branch contains HEAD: {branches[0]}")
            return branches[0]
        if not branches:
            logger.debug("No local branch contains HEAD")
        else:
            logger.debug(f"More than one branch contains HEAD: {', '.join(branches)}")
        return None


def parse_branch_listing(text: str) -> List[str]:
    """Branch names from ``git branch`` output, without markers and detached entries."""
    branches = []
    for line in text.splitlines():
        name = _BRANCH_MARKER.sub("", line.strip())
        if not name or "HEAD detached" in name or name.startswith("(no branch"):
            continue
        branches.append(name)
    return branches
