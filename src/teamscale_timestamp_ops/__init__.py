from .branch import resolve_branch
from .formatter import format_timestamp
from .resolve import ResolutionResult, resolve_timestamp, write_revision_txt

__all__ = [
    "ResolutionResult",
    "format_timestamp",
    "resolve_branch",
    "resolve_timestamp",
    "write_revision_txt",
]
