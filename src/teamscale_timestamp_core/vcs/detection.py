"""Detect which VCS governs a directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..env import EnvReader
from ..errors import NotAVcsDirectory
from .base import GitRepository, RepositoryHandle, SvnWorkingCopy, TfvcWorkspace

logger = logging.getLogger(__name__)

TFVC_MARKERS = ("$tf", ".tf")
TFVC_PROVIDER = "TfsVersionControl"


def _git_marker(directory: Path) -> Optional[GitRepository]:
    marker = directory / ".git"
    if marker.is_dir():
        return GitRepository(root=directory, git_dir=marker)
    if marker.is_file():
        # Worktrees and submodules: ".git" is a file pointing at the real git dir.
        try:
            content = marker.read_text(encoding="utf-8").strip()
        except OSError as exc:
            logger.warning(f"Cannot read {marker}: {exc}")
            return None
        if not content.startswith("gitdir:"):
            logger.warning(f"Ignoring {marker}: no gitdir reference")
            return None
        git_dir = Path(content[len("gitdir:"):].strip())
        if not git_dir.is_absolute():
            git_dir = (directory / git_dir).resolve()
        return GitRepository(root=directory, git_dir=git_dir)
    return None


def _svn_marker(directory: Path) -> Optional[SvnWorkingCopy]:
    if (directory / ".svn").is_dir():
        return SvnWorkingCopy(root=directory)
    return None


def _tfvc_marker(directory: Path) -> Optional[TfvcWorkspace]:
    for name in TFVC_MARKERS:
        marker = directory / name
        if marker.is_dir():
            return TfvcWorkspace(root=directory, marker=marker)
    return None


# Precedence at a single directory level.
_MARKER_CHECKS = (_git_marker, _svn_marker, _tfvc_marker)


def detect(
    path: Path,
    env: Optional[EnvReader] = None,
    ceiling: Optional[Path] = None,
) -> RepositoryHandle:
    """Return the handle of the nearest VCS checkout containing ``path``.

    Walks from ``path`` towards the filesystem root and stops at the first
    directory carrying a Git, SVN or TFVC marker. ``ceiling`` is the last
    directory examined. Raises NotAVcsDirectory if nothing is found.
    """
    start = path.resolve()
    if start.is_file():
        start = start.parent
    stop = ceiling.resolve() if ceiling is not None else None

    for directory in [start, *start.parents]:
        for check in _MARKER_CHECKS:
            handle = check(directory)
            if handle is not None:
                logger.debug(f"Found {handle.kind.value} checkout at {directory}")
                return handle
        if directory == stop:
            break

    env = env or EnvReader()
    if env.get("BUILD_REPOSITORY_PROVIDER") == TFVC_PROVIDER:
        logger.debug("No local marker, but the build reports a TFVC server workspace")
        return TfvcWorkspace(root=start, marker=None)

    logger.debug(f"No VCS marker found above {start}")
    raise NotAVcsDirectory(start)
