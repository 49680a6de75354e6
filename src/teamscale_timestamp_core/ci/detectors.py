"""Branch detection from build server environment variables.

Each detector is a pure function over an EnvReader returning
``(variable, branch)`` or None. DETECTORS fixes the priority order; the
first detector that answers wins.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from ..env import EnvReader
from ..models import CiDetectionResult

logger = logging.getLogger(__name__)

Detection = Optional[Tuple[str, str]]
Detector = Callable[[EnvReader], Detection]

_HEADS = "refs/heads/"


def _strip_prefix(value: str, prefix: str) -> str:
    return value[len(prefix):] if value.startswith(prefix) else value


def teamcity(env: EnvReader) -> Detection:
    # https://www.jetbrains.com/help/teamcity/predefined-build-parameters.html
    for name in ("BUILD_BRANCH", "build_branch"):
        value = env.get(name)
        if value and value != "<default>":
            return name, value
    return None


def azure_devops(env: EnvReader) -> Detection:
    # https://learn.microsoft.com/azure/devops/pipelines/build/variables
    found = env.first("SYSTEM_PULLREQUEST_SOURCEBRANCH")
    if found:
        return found[0], _strip_prefix(found[1], _HEADS)
    source_branch = env.get("BUILD_SOURCEBRANCH")
    if source_branch and source_branch.startswith(_HEADS):
        return "BUILD_SOURCEBRANCH", source_branch[len(_HEADS):]
    # TFVC server paths ($/Project/Main) and refs/pull/... only expose the last segment reliably.
    return env.first("BUILD_SOURCEBRANCHNAME")


def jenkins(env: EnvReader) -> Detection:
    # Multibranch pipelines set BRANCH_NAME, the Git plugin GIT_LOCAL_BRANCH / GIT_BRANCH.
    found = env.first("BRANCH_NAME", "GIT_LOCAL_BRANCH", "GIT_BRANCH", "BRANCH", "branch")
    if found is None:
        return None
    name, value = found
    if name == "GIT_BRANCH":
        value = _strip_prefix(_strip_prefix(value, "origin/"), _HEADS)
    return name, value


def circleci(env: EnvReader) -> Detection:
    return env.first("CIRCLE_BRANCH")


def travis(env: EnvReader) -> Detection:
    # TRAVIS_BRANCH is the target branch for pull request builds.
    return env.first("TRAVIS_PULL_REQUEST_BRANCH", "TRAVIS_BRANCH")


def appveyor(env: EnvReader) -> Detection:
    return env.first("APPVEYOR_PULL_REQUEST_HEAD_REPO_BRANCH", "APPVEYOR_REPO_BRANCH")


def gitlab(env: EnvReader) -> Detection:
    return env.first("CI_MERGE_REQUEST_SOURCE_BRANCH_NAME", "CI_COMMIT_BRANCH", "CI_COMMIT_REF_NAME")


def bitbucket(env: EnvReader) -> Detection:
    return env.first("BITBUCKET_BRANCH")


DETECTORS: Tuple[Tuple[str, Detector], ...] = (
    ("TeamCity", teamcity),
    ("Azure DevOps", azure_devops),
    ("Jenkins", jenkins),
    ("CircleCI", circleci),
    ("TravisCI", travis),
    ("Appveyor", appveyor),
    ("GitLab", gitlab),
    ("Bitbucket", bitbucket),
)

# Every variable a detector may read; tests clear these for a neutral environment.
KNOWN_VARIABLES = (
    "BUILD_BRANCH", "build_branch",
    "SYSTEM_PULLREQUEST_SOURCEBRANCH", "BUILD_SOURCEBRANCH", "BUILD_SOURCEBRANCHNAME",
    "BRANCH_NAME", "GIT_LOCAL_BRANCH", "GIT_BRANCH", "BRANCH", "branch",
    "CIRCLE_BRANCH",
    "TRAVIS_PULL_REQUEST_BRANCH", "TRAVIS_BRANCH",
    "APPVEYOR_PULL_REQUEST_HEAD_REPO_BRANCH", "APPVEYOR_REPO_BRANCH",
    "CI_MERGE_REQUEST_SOURCE_BRANCH_NAME", "CI_COMMIT_BRANCH", "CI_COMMIT_REF_NAME",
    "BITBUCKET_BRANCH",
)


def detect_branch(env: Optional[EnvReader] = None) -> CiDetectionResult:
    """Ask each detector in priority order; empty result if none answers."""
    env = env or EnvReader()
    logger.debug("Trying to determine the branch from build server variables")
    for platform, detector in DETECTORS:
        detection = detector(env)
        if detection and detection[1]:
            variable, branch = detection
            logger.debug(f"Found branch {branch} in ${variable} ({platform})")
            return CiDetectionResult(branch=branch, platform=platform, variable=variable)
    logger.debug("Found no branch in the environment")
    return CiDetectionResult()
