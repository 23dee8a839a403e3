"""Git metadata resolver: reads .git for the current branch."""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitStatus:
    branch: str = ""
    is_repo: bool = False
    is_worktree: bool = False
    detached: bool = False


def find_head_path(project_path: str) -> Path | None:
    """Locate HEAD for a repo or a worktree (.git as file with gitdir pointer)."""
    git_path = Path(project_path) / ".git"
    if git_path.is_dir():
        return git_path / "HEAD"
    if git_path.is_file():
        content = git_path.read_text().strip()
        if content.startswith("gitdir:"):
            return Path(content[len("gitdir:"):].strip()) / "HEAD"
    return None


def read_git_status(project_path: str) -> GitStatus:
    """Read branch information. OSError propagates to the caller."""
    head_path = find_head_path(project_path)
    if head_path is None or not head_path.exists():
        return GitStatus()

    is_worktree = (Path(project_path) / ".git").is_file()
    head = head_path.read_text().strip()
    if head.startswith("ref: refs/heads/"):
        return GitStatus(branch=head[len("ref: refs/heads/"):], is_repo=True, is_worktree=is_worktree)
    # Detached HEAD, short hash
    return GitStatus(branch=head[:8], is_repo=True, is_worktree=is_worktree, detached=True)


def resolve_git_branch(project_path: str) -> str:
    """Read the current git branch from a project path, "" when unavailable."""
    try:
        return read_git_status(project_path).branch
    except (OSError, ValueError):
        logger.debug("Failed to resolve git branch for %s", project_path, exc_info=True)
        return ""


class GitCache:
    """Git status per project, recomputed when HEAD's mtime changes."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[tuple[str, int], GitStatus]] = {}

    def get(self, project_path: str) -> GitStatus:
        head_path = find_head_path(project_path)
        if head_path is None or not head_path.exists():
            return GitStatus()
        key = (str(head_path), head_path.stat().st_mtime_ns)

        with self._lock:
            cached = self._entries.get(project_path)
        if cached is not None and cached[0] == key:
            return cached[1]

        status = read_git_status(project_path)
        with self._lock:
            self._entries[project_path] = (key, status)
        return status

    def clear(self):
        with self._lock:
            self._entries.clear()
