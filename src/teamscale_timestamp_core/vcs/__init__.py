"""VCS detection and revision lookup."""

from __future__ import annotations

from typing import Optional

import httpx

from ..config import TfvcSettings
from ..env import EnvReader
from ..models import RevisionInfo
from .base import GitRepository, RepositoryHandle, SvnWorkingCopy, TfvcWorkspace, VcsAdapter
from .git_adapter import GitAdapter
from .detection import detect
from .process import CommandResult, CommandRunner, run_command
from .svn_adapter import SvnAdapter
from .tfvc_adapter import TfvcAdapter


def resolve_revision(
    handle: RepositoryHandle,
    env: Optional[EnvReader] = None,
    *,
    branch_override: Optional[str] = None,
    personal_access_token: Optional[str] = None,
    tfvc_settings: Optional[TfvcSettings] = None,
    runner: CommandRunner = run_command,
    transport: Optional[httpx.BaseTransport] = None,
) -> RevisionInfo:
    """Dispatch ``handle`` to the adapter of its VCS."""
    if isinstance(handle, GitRepository):
        return GitAdapter(runner=runner).resolve(handle)
    if isinstance(handle, SvnWorkingCopy):
        return SvnAdapter(env=env, runner=runner).resolve(handle)
    if isinstance(handle, TfvcWorkspace):
        return TfvcAdapter(
            env=env,
            settings=tfvc_settings,
            branch_override=branch_override,
            personal_access_token=personal_access_token,
            transport=transport,
        ).resolve(handle)
    raise TypeError(f"Unsupported repository handle: {handle!r}")


__all__ = [
    "CommandResult",
    "CommandRunner",
    "GitAdapter",
    "GitRepository",
    "RepositoryHandle",
    "SvnAdapter",
    "SvnWorkingCopy",
    "TfvcAdapter",
    "TfvcWorkspace",
    "VcsAdapter",
    "detect",
    "resolve_revision",
    "run_command",
]
