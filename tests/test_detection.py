"""Tests for VCS detection."""

from pathlib import Path

import pytest

from teamscale_timestamp_core.env import EnvReader
from teamscale_timestamp_core.errors import NotAVcsDirectory
from teamscale_timestamp_core.models import VcsKind
from teamscale_timestamp_core.vcs import GitRepository, SvnWorkingCopy, TfvcWorkspace, detect


def _mkdirs(*paths: Path) -> None:
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


@pytest.mark.parametrize(
    "marker, expected",
    [
        (".git", VcsKind.GIT),
        (".svn", VcsKind.SVN),
        ("$tf", VcsKind.TFVC),
        (".tf", VcsKind.TFVC),
    ],
)
def test_detects_marker_in_start_directory(tmp_path: Path, marker: str, expected: VcsKind):
    _mkdirs(tmp_path / marker)
    handle = detect(tmp_path, env=EnvReader({}), ceiling=tmp_path)
    assert handle.kind is expected
    assert handle.root == tmp_path.resolve()


def test_walks_up_to_parent_checkout(tmp_path: Path):
    _mkdirs(tmp_path / ".svn", tmp_path / "src" / "main" / "java")
    handle = detect(tmp_path / "src" / "main" / "java", env=EnvReader({}), ceiling=tmp_path)
    assert isinstance(handle, SvnWorkingCopy)
    assert handle.root == tmp_path.resolve()


def test_nearest_checkout_wins_over_outer_checkout_of_other_kind(tmp_path: Path):
    inner = tmp_path / "externals" / "lib"
    _mkdirs(tmp_path / ".svn", inner / ".git")
    handle = detect(inner, env=EnvReader({}), ceiling=tmp_path)
    assert isinstance(handle, GitRepository)
    assert handle.root == inner.resolve()

    nested_svn = tmp_path / "git-repo" / "vendored"
    _mkdirs(tmp_path / "git-repo" / ".git", nested_svn / ".svn")
    handle = detect(nested_svn, env=EnvReader({}), ceiling=tmp_path)
    assert isinstance(handle, SvnWorkingCopy)
    assert handle.root == nested_svn.resolve()


def test_git_takes_precedence_at_same_level(tmp_path: Path):
    _mkdirs(tmp_path / ".git", tmp_path / ".svn", tmp_path / "$tf")
    assert detect(tmp_path, env=EnvReader({}), ceiling=tmp_path).kind is VcsKind.GIT


def test_svn_takes_precedence_over_tfvc_at_same_level(tmp_path: Path):
    _mkdirs(tmp_path / ".svn", tmp_path / "$tf")
    assert detect(tmp_path, env=EnvReader({}), ceiling=tmp_path).kind is VcsKind.SVN


def test_gitfile_of_worktree_is_followed(tmp_path: Path):
    real_git_dir = tmp_path / "main" / ".git" / "worktrees" / "feature"
    worktree = tmp_path / "feature"
    _mkdirs(real_git_dir, worktree)
    (worktree / ".git").write_text("gitdir: ../main/.git/worktrees/feature\n", encoding="utf-8")

    handle = detect(worktree, env=EnvReader({}), ceiling=tmp_path)
    assert isinstance(handle, GitRepository)
    assert handle.root == worktree.resolve()
    assert handle.git_dir == real_git_dir.resolve()


def test_file_path_starts_at_its_directory(tmp_path: Path):
    _mkdirs(tmp_path / ".git")
    source = tmp_path / "build.gradle"
    source.write_text("", encoding="utf-8")
    assert detect(source, env=EnvReader({}), ceiling=tmp_path).root == tmp_path.resolve()


def test_no_marker_raises(tmp_path: Path):
    start = tmp_path / "plain" / "dir"
    _mkdirs(start)
    with pytest.raises(NotAVcsDirectory) as info:
        detect(start, env=EnvReader({}), ceiling=tmp_path)
    assert info.value.path == start.resolve()
    assert "--path" in info.value.hint


def test_ceiling_stops_the_search(tmp_path: Path):
    start = tmp_path / "project"
    _mkdirs(tmp_path / ".git", start)
    with pytest.raises(NotAVcsDirectory):
        detect(start, env=EnvReader({}), ceiling=start)


def test_tfvc_server_workspace_from_build_environment(tmp_path: Path):
    env = EnvReader({"BUILD_REPOSITORY_PROVIDER": "TfsVersionControl"})
    handle = detect(tmp_path, env=env, ceiling=tmp_path)
    assert isinstance(handle, TfvcWorkspace)
    assert handle.marker is None


def test_local_marker_beats_tfvc_build_environment(tmp_path: Path):
    _mkdirs(tmp_path / ".git")
    env = EnvReader({"BUILD_REPOSITORY_PROVIDER": "TfsVersionControl"})
    assert detect(tmp_path, env=env, ceiling=tmp_path).kind is VcsKind.GIT
