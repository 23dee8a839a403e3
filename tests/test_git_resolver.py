"""Tests for statusline_pro.services.git_resolver."""

import os

import pytest

from statusline_pro.services.git_resolver import (
    GitCache,
    GitStatus,
    read_git_status,
    resolve_git_branch,
)


@pytest.fixture
def git_repo(tmp_path):
    """Create a fake git repo with HEAD on main branch."""
    git_dir = tmp_path / ".git"
    git_dir.mkdir()
    (git_dir / "HEAD").write_text("ref: refs/heads/main\n")
    return tmp_path


@pytest.fixture
def worktree_repo(tmp_path, git_repo):
    """Create a fake worktree pointing at git_repo."""
    wt = tmp_path / "worktree"
    wt.mkdir()
    # .git is a file, not a directory
    (wt / ".git").write_text(f"gitdir: {git_repo / '.git'}\n")
    return wt


# ---------------------------------------------------------------------------
# 1. Resolve branch from regular repo
# ---------------------------------------------------------------------------

def test_resolve_branch(git_repo):
    assert resolve_git_branch(str(git_repo)) == "main"


# ---------------------------------------------------------------------------
# 2. Resolve detached HEAD
# ---------------------------------------------------------------------------

def test_detached_head(git_repo):
    (git_repo / ".git" / "HEAD").write_text("a1b2c3d4e5f6a7b8c9d0\n")
    status = read_git_status(str(git_repo))
    assert status.branch == "a1b2c3d4"
    assert status.detached is True


# ---------------------------------------------------------------------------
# 3. Not a repo
# ---------------------------------------------------------------------------

def test_not_a_repo(tmp_path):
    assert resolve_git_branch(str(tmp_path)) == ""
    assert read_git_status(str(tmp_path)) == GitStatus()


# ---------------------------------------------------------------------------
# 4. Worktree
# ---------------------------------------------------------------------------

def test_worktree(worktree_repo):
    status = read_git_status(str(worktree_repo))
    assert status.branch == "main"
    assert status.is_worktree is True


# ---------------------------------------------------------------------------
# 5. Cache follows HEAD modifications
# ---------------------------------------------------------------------------

def test_cache_reuses_status(git_repo):
    cache = GitCache()
    first = cache.get(str(git_repo))
    assert cache.get(str(git_repo)) is first


def test_cache_refreshes_on_head_change(git_repo):
    cache = GitCache()
    head = git_repo / ".git" / "HEAD"
    assert cache.get(str(git_repo)).branch == "main"

    mtime_ns = head.stat().st_mtime_ns
    head.write_text("ref: refs/heads/feature\n")
    os.utime(head, ns=(mtime_ns + 5_000_000_000, mtime_ns + 5_000_000_000))
    assert cache.get(str(git_repo)).branch == "feature"


def test_cache_clear(git_repo):
    cache = GitCache()
    first = cache.get(str(git_repo))
    cache.clear()
    assert cache.get(str(git_repo)) is not first
