"""Application entry point: read the host payload, persist usage, print one line."""

import argparse
import logging
import os
import sys
from typing import TextIO

import orjson

from statusline_pro.errors import ConfigError, StorageError
from statusline_pro.services.config_manager import ConfigManager
from statusline_pro.services.git_resolver import GitCache
from statusline_pro.services.runtime import StorageRuntime
from statusline_pro.services.storage import initialize_storage
from statusline_pro.types import SessionSnapshot, StatusInput, StatusLineConfig
from statusline_pro.utils.path_codec import extract_project_name, hash_project_path
from statusline_pro.utils.payload_sanitizer import parse_status_input

logger = logging.getLogger(__name__)

FALLBACK_LINE = "statusline-pro: no input"
SEPARATOR = " | "

_git_cache = GitCache()


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="statusline-pro",
        description="Render a status line from the JSON payload on stdin.",
    )
    parser.add_argument("--config", help="Explicit config.toml, applied over user and project files")
    parser.add_argument("--debug", action="store_true", help="Log debug output to stderr")
    return parser.parse_args(argv)


def _configure_logging(debug: bool):
    if debug or os.environ.get("STATUSLINE_DEBUG") or os.environ.get("DEBUG"):
        level = logging.DEBUG
    else:
        level = logging.WARNING
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


def run(argv: list[str] | None = None, stdin: TextIO | None = None, stdout: TextIO | None = None) -> int:
    """Render one status line. Storage failures never change the exit code."""
    args = _parse_args(argv)
    _configure_logging(args.debug)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    raw = _read_payload(stdin)
    if raw is None:
        print(FALLBACK_LINE, file=stdout)
        return 0
    status = parse_status_input(raw)

    runtime = StorageRuntime()
    if not runtime.set_project_id_from_transcript(status.transcript_path):
        runtime.set_project_id(hash_project_path(_project_path(status)))

    config = _load_config(runtime.project_id, args.config)
    snapshot = _persist(status, config, runtime)

    print(render_line(config.preset, status, snapshot, _resolve_branch(_project_path(status))), file=stdout)
    return 0


def _read_payload(stdin: TextIO) -> dict | None:
    text = stdin.read()
    if not text.strip():
        return None
    try:
        raw = orjson.loads(text)
    except orjson.JSONDecodeError as e:
        logger.warning("Invalid JSON on stdin: %s", e)
        return None
    return raw if isinstance(raw, dict) else None


def _project_path(status: StatusInput) -> str:
    return status.project_dir or status.cwd or os.getcwd()


def _load_config(project_id: str | None, custom_path: str | None) -> StatusLineConfig:
    manager = ConfigManager(project_id=project_id, custom_path=custom_path)
    try:
        return manager.load()
    except ConfigError as e:
        logger.warning("Using default configuration: %s", e)
        return manager.default_config()


def _persist(status: StatusInput, config: StatusLineConfig, runtime: StorageRuntime) -> SessionSnapshot | None:
    """Update the session snapshot; None when nothing could be persisted."""
    try:
        store = initialize_storage(config.storage, runtime=runtime)
        if not status.session_id or not config.storage.enable_cost_persistence:
            return None
        return store.update_input(status)
    except (StorageError, OSError) as e:
        logger.warning("Session usage not persisted: %s", e)
        return None


def _resolve_branch(project_path: str) -> str:
    try:
        return _git_cache.get(project_path).branch
    except (OSError, ValueError):
        logger.debug("Failed to resolve git branch for %s", project_path, exc_info=True)
        return ""


def render_line(preset: str, status: StatusInput, snapshot: SessionSnapshot | None, branch: str) -> str:
    """Join the segments selected by `preset` (P, M, B, T, U), skipping empty ones."""
    segments = {
        "P": lambda: extract_project_name(_project_path(status)),
        "M": lambda: _model_segment(status),
        "B": lambda: branch,
        "T": lambda: _tokens_segment(snapshot),
        "U": lambda: _cost_segment(status, snapshot),
    }
    parts = []
    for letter in preset.upper():
        build = segments.get(letter)
        if build is None:
            continue
        text = build()
        if text:
            parts.append(text)
    return SEPARATOR.join(parts) or FALLBACK_LINE


def _model_segment(status: StatusInput) -> str:
    if status.model is None:
        return ""
    return status.model.display_name or status.model.id


def _tokens_segment(snapshot: SessionSnapshot | None) -> str:
    if snapshot is None or snapshot.history.tokens is None:
        return ""
    return f"{format_tokens(snapshot.history.tokens.context_used)} tokens"


def _cost_segment(status: StatusInput, snapshot: SessionSnapshot | None) -> str:
    if snapshot is not None:
        return f"${snapshot.history.cost.total.total_cost_usd:.2f}"
    if status.cost is not None:
        return f"${status.cost.total_cost_usd:.2f}"
    return ""


def format_tokens(count: int) -> str:
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}k"
    return str(count)
