"""Encode project paths into stable per-project directory names.

/Users/name/project      → -Users-name-project
C:\\Users\\name\\project  → C--Users-name-project

The encoded id names the directory that holds all persisted state for a
project, so the output for a given path must never change between releases.
"""

import os
import re

_UNC_PREFIXES = ("\\\\\\\\?\\", "\\\\?\\")

_DRIVE_BACKSLASH_RE = re.compile(r'^([A-Za-z]):\\')
_DRIVE_SLASH_RE = re.compile(r'^([A-Za-z]):/')
_SEPARATORS_RE = re.compile(r'[\\/:]')
_MULTIPLE_DASHES_RE = re.compile(r'-+')
_PROJECTS_DIR_RE = re.compile(r'[/\\]projects[/\\]([^/\\]+)[/\\]')


def hash_project_path(project_path: str) -> str:
    """Encode a filesystem path to a project directory name.

    The path is canonicalized first (relative paths and symlinks resolve);
    paths that do not exist are encoded as given.
    """
    if not project_path:
        raise ValueError("Project path cannot be empty")

    try:
        result = os.path.realpath(project_path, strict=True)
    except (OSError, ValueError):
        result = project_path

    result = _strip_unc_prefix(result)

    drive = _DRIVE_BACKSLASH_RE.match(result) or _DRIVE_SLASH_RE.match(result)
    if drive:
        rest = result[drive.end():]
        rest = _collapse_dashes(rest.replace("\\", "-").replace("/", "-")).strip("-")
        return f"{drive.group(1)}--{rest}" if rest else f"{drive.group(1)}--"

    result = _SEPARATORS_RE.sub("-", result)
    return _collapse_dashes(result.rstrip("-"))


def extract_project_id_from_transcript(transcript_path: str) -> str | None:
    """Pull the project id out of a transcript path.

    /home/wiz/.claude/projects/-home-wiz-app/abc.jsonl → -home-wiz-app
    """
    if not transcript_path:
        return None
    match = _PROJECTS_DIR_RE.search(transcript_path)
    return match.group(1) if match else None


def extract_project_name(project_path: str) -> str:
    """Last path segment, used as the project display name."""
    if not project_path:
        return ""
    trimmed = project_path.replace("\\", "/").rstrip("/")
    return trimmed.rsplit("/", 1)[-1]


def _strip_unc_prefix(path: str) -> str:
    for prefix in _UNC_PREFIXES:
        if path.startswith(prefix):
            return path[len(prefix):].lstrip("\\")
    return path


def _collapse_dashes(value: str) -> str:
    return _MULTIPLE_DASHES_RE.sub("-", value)
