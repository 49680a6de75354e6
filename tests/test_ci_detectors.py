"""Tests for build server branch detection."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from teamscale_timestamp_core.ci import DETECTORS, KNOWN_VARIABLES, detect_branch
from teamscale_timestamp_core.env import EnvReader


def test_empty_environment_means_no_branch():
    result = detect_branch(EnvReader({}))
    assert not result.found
    assert result.branch is None
    assert result.platform is None


def test_read_branch_from_generic_variable():
    result = detect_branch(EnvReader({"GIT_BRANCH": "the-branch"}))
    assert result.branch == "the-branch"
    assert result.platform == "Jenkins"
    assert result.variable == "GIT_BRANCH"


@pytest.mark.parametrize(
    "env, platform, branch",
    [
        ({"BUILD_BRANCH": "develop"}, "TeamCity", "develop"),
        ({"build_branch": "develop"}, "TeamCity", "develop"),
        ({"BUILD_SOURCEBRANCH": "refs/heads/feature/x", "BUILD_SOURCEBRANCHNAME": "x"}, "Azure DevOps", "feature/x"),
        ({"SYSTEM_PULLREQUEST_SOURCEBRANCH": "refs/heads/topic"}, "Azure DevOps", "topic"),
        ({"BUILD_SOURCEBRANCH": "$/Project/Main", "BUILD_SOURCEBRANCHNAME": "Main"}, "Azure DevOps", "Main"),
        ({"BRANCH_NAME": "PR-12"}, "Jenkins", "PR-12"),
        ({"GIT_BRANCH": "origin/master"}, "Jenkins", "master"),
        ({"BRANCH": "generic"}, "Jenkins", "generic"),
        ({"CIRCLE_BRANCH": "circle"}, "CircleCI", "circle"),
        ({"TRAVIS_BRANCH": "master", "TRAVIS_PULL_REQUEST_BRANCH": "fix"}, "TravisCI", "fix"),
        ({"TRAVIS_BRANCH": "master", "TRAVIS_PULL_REQUEST_BRANCH": ""}, "TravisCI", "master"),
        ({"APPVEYOR_REPO_BRANCH": "av"}, "Appveyor", "av"),
        ({"APPVEYOR_PULL_REQUEST_HEAD_REPO_BRANCH": "pr", "APPVEYOR_REPO_BRANCH": "av"}, "Appveyor", "pr"),
        ({"CI_COMMIT_REF_NAME": "gl"}, "GitLab", "gl"),
        ({"CI_MERGE_REQUEST_SOURCE_BRANCH_NAME": "mr", "CI_COMMIT_REF_NAME": "gl"}, "GitLab", "mr"),
        ({"BITBUCKET_BRANCH": "bb"}, "Bitbucket", "bb"),
    ],
)
def test_platform_variables(env, platform, branch):
    result = detect_branch(EnvReader(env))
    assert (result.platform, result.branch) == (platform, branch)


def test_teamcity_default_branch_placeholder_is_ignored():
    assert not detect_branch(EnvReader({"BUILD_BRANCH": "<default>"})).found


def test_blank_values_are_ignored():
    result = detect_branch(EnvReader({"BUILD_BRANCH": "  ", "CIRCLE_BRANCH": "", "BITBUCKET_BRANCH": "bb"}))
    assert result.platform == "Bitbucket"


def test_earlier_platform_wins():
    env = {"TRAVIS_BRANCH": "travis", "CIRCLE_BRANCH": "circle"}
    assert detect_branch(EnvReader(env)).platform == "CircleCI"

    env = {"CI_COMMIT_REF_NAME": "gitlab", "BUILD_BRANCH": "teamcity"}
    assert detect_branch(EnvReader(env)).branch == "teamcity"


def test_priority_order():
    assert [name for name, _ in DETECTORS] == [
        "TeamCity",
        "Azure DevOps",
        "Jenkins",
        "CircleCI",
        "TravisCI",
        "Appveyor",
        "GitLab",
        "Bitbucket",
    ]


# One representative variable per platform, in priority order.
_REPRESENTATIVES = [
    "BUILD_BRANCH",
    "BUILD_SOURCEBRANCHNAME",
    "BRANCH_NAME",
    "CIRCLE_BRANCH",
    "TRAVIS_BRANCH",
    "APPVEYOR_REPO_BRANCH",
    "CI_COMMIT_REF_NAME",
    "BITBUCKET_BRANCH",
]


@given(st.sets(st.sampled_from(range(len(_REPRESENTATIVES))), min_size=1))
def test_highest_priority_platform_is_used(indices):
    env = {_REPRESENTATIVES[i]: f"branch-{i}" for i in indices}
    result = detect_branch(EnvReader(env))
    winner = min(indices)
    assert result.branch == f"branch-{winner}"
    assert result.platform == DETECTORS[winner][0]


def test_known_variables_cover_representatives():
    assert set(_REPRESENTATIVES) <= set(KNOWN_VARIABLES)
