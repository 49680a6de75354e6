"""Configuration loading.

Settings come from built-in defaults, an optional TOML file and finally the
command line. The file is located via an explicit path, then
``$TEAMSCALE_TIMESTAMP_CONFIG``, then ``.teamscale-timestamp.toml`` in the
start directory or one of its parents.
"""

from __future__ import annotations

import copy
import logging
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from .env import EnvReader
from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TEAMSCALE_TIMESTAMP_CONFIG"
CONFIG_FILE_NAME = ".teamscale-timestamp.toml"


class BranchPrecedence(str, Enum):
    """Order in which VCS hints and CI variables are consulted after an override."""
    VCS_FIRST = "vcs-first"
    CI_FIRST = "ci-first"


class BranchSettings(BaseModel):
    precedence: BranchPrecedence = BranchPrecedence.VCS_FIRST
    guess_from_git: bool = False


class TfvcSettings(BaseModel):
    timeout: float = Field(default=10.0, gt=0)
    collection_uri: Optional[str] = None
    project: Optional[str] = None
    changeset: Optional[str] = None


class LogSettings(BaseModel):
    verbose: bool = False


class TimestampConfig(BaseModel):
    branch: BranchSettings = Field(default_factory=BranchSettings)
    tfvc: TfvcSettings = Field(default_factory=TfvcSettings)
    log: LogSettings = Field(default_factory=LogSettings)


def merge_defaults(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def find_config_file(start: Path, env: Optional[EnvReader] = None) -> Optional[Path]:
    """Locate the configuration file for ``start``; None when there is none."""
    env = env or EnvReader()
    configured = env.get(CONFIG_ENV_VAR)
    if configured:
        return Path(configured)
    start = start.resolve()
    for parent in [start, *start.parents]:
        candidate = parent / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def load_config(
    start: Path,
    config_path: Optional[Path] = None,
    env: Optional[EnvReader] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> TimestampConfig:
    """Load the effective configuration.

    ``overrides`` holds values from the command line in the same nested
    layout as the file (``{"tfvc": {"timeout": 5.0}}``); ``None`` leaves are
    dropped so unset flags do not mask file values.
    """
    path = config_path or find_config_file(start, env)
    data: Dict[str, Any] = {}
    if path is not None:
        logger.debug(f"Reading configuration from {path}")
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(path, str(exc)) from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(path, f"not valid TOML ({exc})") from exc

    merged = merge_defaults(TimestampConfig().model_dump(mode="json"), data)
    if overrides:
        merged = merge_defaults(merged, _strip_nulls(overrides))
    try:
        return TimestampConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(path or Path(CONFIG_FILE_NAME), str(exc)) from exc


def _strip_nulls(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _strip_nulls(v) for k, v in value.items() if v is not None}
    return value
