"""Error taxonomy for timestamp resolution.

Every failure is terminal for the run. Each exception carries a ``hint``
naming the recovery path (usually a CLI flag) so the command line can render
an actionable message.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from .models import VcsKind


class TimestampError(Exception):
    """Base class for all resolution failures."""

    hint: Optional[str] = None

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        if hint is not None:
            self.hint = hint


class NotAVcsDirectory(TimestampError):
    """No Git, SVN or TFVC marker governs the given path."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"{path} is not inside a Git repository, SVN working copy or TFVC workspace",
            hint="Run the command from within your checkout or pass --path <checkout-dir>.",
        )


class VcsErrorKind(str, Enum):
    NO_COMMITS = "no-commits"
    UNREADABLE = "unreadable"
    NOT_A_WORKING_COPY = "not-a-working-copy"
    CLIENT_UNAVAILABLE = "client-unavailable"
    MISSING_BRANCH = "missing-branch"
    AUTHENTICATION_MISSING = "authentication-missing"
    API_ERROR = "api-error"


_DEFAULT_HINTS = {
    VcsErrorKind.NO_COMMITS: "Create at least one commit before uploading data for this repository.",
    VcsErrorKind.CLIENT_UNAVAILABLE: "Install the command line client and make sure it is on the PATH.",
    VcsErrorKind.MISSING_BRANCH: "Pass the branch explicitly with --branch <name>.",
    VcsErrorKind.AUTHENTICATION_MISSING: (
        "Pass a personal access token with --tfs-pat or enable "
        "'Allow scripts to access the OAuth token' for the pipeline job."
    ),
}


class VcsError(TimestampError):
    """A VCS adapter could not produce revision information."""

    def __init__(
        self,
        kind: VcsErrorKind,
        vcs: VcsKind,
        step: str,
        message: str,
        *,
        hint: Optional[str] = None,
        status_code: Optional[int] = None,
        timed_out: bool = False,
    ):
        self.kind = kind
        self.vcs = vcs
        self.step = step
        self.status_code = status_code
        self.timed_out = timed_out
        super().__init__(
            f"[{vcs.value}] {step}: {message}",
            hint=hint if hint is not None else _DEFAULT_HINTS.get(kind),
        )


class BranchErrorKind(str, Enum):
    UNDETERMINED = "undetermined"


class BranchError(TimestampError):
    """No override, VCS hint or CI variable produced a branch name."""

    def __init__(self, vcs: Optional[VcsKind] = None, kind: BranchErrorKind = BranchErrorKind.UNDETERMINED):
        self.kind = kind
        self.vcs = vcs
        where = f" for this {vcs.value.upper()} checkout" if vcs is not None else ""
        super().__init__(
            f"Could not determine the branch{where} (detached HEAD, unconventional "
            "repository layout or unsupported build server)",
            hint="Pass the branch explicitly with --branch <name>.",
        )


class FormatError(TimestampError):
    """A field required for the output token is empty."""


class ConfigError(TimestampError):
    """The configuration file is unreadable or invalid."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Invalid configuration file {path}: {reason}")
