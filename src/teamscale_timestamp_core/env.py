"""Environment variable access with diagnostic logging."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

_SECRET_MARKERS = ("TOKEN", "PAT", "PASSWORD", "SECRET")


def _mask(name: str, value: str) -> str:
    if any(marker in name.upper() for marker in _SECRET_MARKERS):
        return "****"
    return value


class EnvReader:
    """Read-only view of an environment mapping.

    Empty and whitespace-only values are treated as unset. Every lookup is
    logged at debug level so ``--verbose`` shows what the resolver consulted.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ

    def get(self, name: str) -> Optional[str]:
        raw = self._environ.get(name)
        value = raw.strip() if raw is not None else ""
        logger.debug(f"${name}={_mask(name, value)}")
        return value or None

    def first(self, *names: str) -> Optional[tuple[str, str]]:
        """Return ``(name, value)`` of the first variable that is set."""
        for name in names:
            value = self.get(name)
            if value:
                return name, value
        return None
