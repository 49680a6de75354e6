import os
import shutil
import subprocess
from pathlib import Path

import pytest
from hypothesis import settings

from teamscale_timestamp_core.ci import KNOWN_VARIABLES

# Prevent Hypothesis from writing a local example database (e.g. `.hypothesis/`) during tests.
settings.register_profile("timestamp-tests", database=None)
settings.load_profile("timestamp-tests")

# 2019-08-06T14:13:34Z
COMMIT_DATE = "2019-08-06T14:13:34+00:00"
COMMIT_EPOCH = 1565100814

_OTHER_VARIABLES = (
    "SVN_URL",
    "SYSTEM_ACCESSTOKEN",
    "SYSTEM_TEAMFOUNDATIONCOLLECTIONURI",
    "SYSTEM_TEAMPROJECTID",
    "SYSTEM_TEAMPROJECT",
    "BUILD_SOURCEVERSION",
    "BUILD_REPOSITORY_PROVIDER",
    "TEAMSCALE_TIMESTAMP_CONFIG",
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


@pytest.fixture(autouse=True)
def neutral_environment(monkeypatch):
    """Hide the build server the test suite itself may be running on."""
    for name in (*KNOWN_VARIABLES, *_OTHER_VARIABLES):
        monkeypatch.delenv(name, raising=False)


def git(repo: Path, *args: str) -> str:
    env = {
        **os.environ,
        "GIT_AUTHOR_NAME": "Test",
        "GIT_AUTHOR_EMAIL": "test@example.com",
        "GIT_COMMITTER_NAME": "Test",
        "GIT_COMMITTER_EMAIL": "test@example.com",
        "GIT_AUTHOR_DATE": COMMIT_DATE,
        "GIT_COMMITTER_DATE": COMMIT_DATE,
        "GIT_CONFIG_NOSYSTEM": "1",
    }
    result = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "-c", "core.hooksPath=/dev/null", *args],
        cwd=str(repo),
        env=env,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def empty_git_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    return repo


@pytest.fixture
def git_repo(empty_git_repo: Path) -> Path:
    git(empty_git_repo, "commit", "-q", "--allow-empty", "-m", "initial")
    return empty_git_repo
