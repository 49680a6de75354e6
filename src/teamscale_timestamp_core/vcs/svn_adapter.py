"""SVN VCS adapter.

Talks to the ``svn`` command line client. The branch is derived from the
URL of the working-copy root using the standard layout: ``trunk`` or a
single path segment below ``branches/`` or ``tags/``.

Any checkout below ``trunk`` still yields ``trunk``. A checkout of a
sub-directory of a branch (``branches/<name>/module``) yields no branch;
such builds need ``--branch`` or a CI branch variable.
"""

from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import unquote

from ..env import EnvReader
from ..errors import VcsError, VcsErrorKind
from ..models import RevisionInfo, VcsKind
from .base import SvnWorkingCopy, parse_rfc3339
from .process import CommandResult, CommandRunner, run_command

logger = logging.getLogger(__name__)

_TRUNK = re.compile(r"/trunk(?:/|$)")
_BRANCH = re.compile(r"/(?:branches|tags)/(?P<rest>.+?)/*$")
_NOT_A_WORKING_COPY = "E155007"


def extract_branch_from_url(url: str) -> Optional[str]:
    """Branch name for a working-copy root URL, or None."""
    url = url.strip()
    match = _BRANCH.search(url)
    if match:
        rest = match.group("rest")
        if "/" in rest:
            logger.debug(f"Branch path {rest!r} has more than one segment, not deriving a branch")
            return None
        return unquote(rest)
    if _TRUNK.search(url):
        return "trunk"
    return None


class SvnAdapter:
    """SVN VCS adapter."""

    def __init__(self, env: Optional[EnvReader] = None, runner: CommandRunner = run_command):
        self._env = env or EnvReader()
        self._runner = runner

    def _info(self, handle: SvnWorkingCopy, item: str) -> str:
        step = f"svn info --show-item {item}"
        try:
            result = self._runner(
                ["svn", "info", "--show-item", item], handle.root, extra_env={"LANG": "C"}
            )
        except FileNotFoundError as exc:
            raise VcsError(
                VcsErrorKind.CLIENT_UNAVAILABLE, VcsKind.SVN, step,
                "the svn executable was not found",
            ) from exc
        if not result.ok:
            raise self._failure(step, handle, result)
        value = result.stdout.strip()
        if not value:
            raise VcsError(VcsErrorKind.UNREADABLE, VcsKind.SVN, step, "empty output")
        return value

    def _failure(self, step: str, handle: SvnWorkingCopy, result: CommandResult) -> VcsError:
        detail = result.stderr.strip() or f"exit code {result.returncode}"
        if _NOT_A_WORKING_COPY in result.stderr:
            return VcsError(
                VcsErrorKind.NOT_A_WORKING_COPY, VcsKind.SVN, step,
                f"{handle.root} is not a working copy ({detail})",
            )
        return VcsError(VcsErrorKind.UNREADABLE, VcsKind.SVN, step, detail)

    def resolve(self, handle: SvnWorkingCopy) -> RevisionInfo:
        if not (handle.root / ".svn").is_dir():
            raise VcsError(
                VcsErrorKind.NOT_A_WORKING_COPY, VcsKind.SVN, "check working copy",
                f"no .svn directory in {handle.root}",
            )

        revision = self._info(handle, "last-changed-revision")
        date_string = self._info(handle, "last-changed-date")
        logger.debug(f"Read date {date_string} from SVN")
        try:
            committed = parse_rfc3339(date_string)
        except ValueError:
            raise VcsError(
                VcsErrorKind.UNREADABLE, VcsKind.SVN, "svn info --show-item last-changed-date",
                f"cannot parse date {date_string!r}",
            ) from None

        return RevisionInfo(
            vcs=VcsKind.SVN,
            revision_id=revision,
            commit_timestamp=committed,
            branch_hint=self.branch(handle),
        )

    def branch(self, handle: SvnWorkingCopy) -> Optional[str]:
        """Branch from the working-copy URL, falling back to ``$SVN_URL``."""
        url = self._info(handle, "url")
        logger.debug(f"Trying to parse SVN URL: {url}")
        branch = extract_branch_from_url(url)
        if branch is None:
            branch = self.branch_from_environment()
        if branch:
            logger.debug(f"Found SVN branch {branch}")
        else:
            logger.debug("Found no SVN branch")
        return branch

    def branch_from_environment(self) -> Optional[str]:
        # Set by the Jenkins Subversion plugin.
        url = self._env.get("SVN_URL")
        if not url:
            return None
        return extract_branch_from_url(url)
