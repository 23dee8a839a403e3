"""On-disk session snapshots: one JSON file per session id."""

import logging
import os
import tempfile
import time
from dataclasses import replace
from pathlib import Path

import orjson

from statusline_pro.errors import StorageError, TranscriptReadError
from statusline_pro.services.cost_accumulator import apply_cost
from statusline_pro.services.runtime import StorageRuntime
from statusline_pro.services.transcript_cursor import advance
from statusline_pro.types.config import StorageConfig, StoragePaths
from statusline_pro.types.payload import ModelInfo, StatusInput
from statusline_pro.types.snapshots import (
    ModelUsageEntry,
    SessionHistory,
    SessionSnapshot,
    utc_now,
)
from statusline_pro.utils.path_codec import hash_project_path
from statusline_pro.utils.payload_sanitizer import parse_status_input, sanitize_latest

logger = logging.getLogger(__name__)

APP_DIR_NAME = "statusline-pro"
SECONDS_PER_DAY = 24 * 60 * 60
TEMP_SUFFIX = ".tmp"


def default_storage_root() -> Path:
    return Path.home() / ".claude"


def build_storage_paths(config: StorageConfig, project_id: str) -> StoragePaths:
    """Layout: <root>/projects/<project id>/statusline-pro/sessions/<session id>.json"""
    base = Path(config.storage_path) if config.storage_path else default_storage_root()
    project_dir = base / "projects" / project_id / APP_DIR_NAME
    return StoragePaths(
        user_config_dir=base / APP_DIR_NAME,
        project_config_dir=project_dir,
        sessions_dir=project_dir / "sessions",
        user_config_path=base / APP_DIR_NAME / "config.toml",
        project_config_path=project_dir / "config.toml",
    )


class SnapshotStore:
    """Loads, updates and atomically persists session snapshots for one project."""

    def __init__(self, config: StorageConfig | None = None, project_id: str | None = None):
        self._config = config or StorageConfig()
        self._project_id = project_id or hash_project_path(os.getcwd())
        self._paths = build_storage_paths(self._config, self._project_id)
        self.ensure_directories()

    @classmethod
    def from_runtime(cls, runtime: StorageRuntime) -> "SnapshotStore":
        return cls(runtime.config, runtime.resolve_project_id())

    @property
    def config(self) -> StorageConfig:
        return self._config

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def paths(self) -> StoragePaths:
        return self._paths

    def ensure_directories(self):
        for directory in (
            self._paths.user_config_dir,
            self._paths.project_config_dir,
            self._paths.sessions_dir,
        ):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError(f"Failed to create directory {directory}: {e}") from e

    def session_file_path(self, session_id: str) -> Path:
        if not session_id or "/" in session_id or "\\" in session_id or session_id in (".", ".."):
            raise StorageError(f"Invalid session id: {session_id!r}")
        return self._paths.sessions_dir / f"{session_id}.json"

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, session_id: str) -> SessionSnapshot | None:
        """Load a snapshot without modifying it.

        A missing file and a corrupt file both yield None; a corrupt file is
        overwritten by the next successful update.
        """
        path = self.session_file_path(session_id)
        try:
            content = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read session file {path}: {e}") from e

        try:
            return SessionSnapshot.from_dict(orjson.loads(content))
        except ValueError as e:
            logger.warning("Failed to parse snapshot %s, recreating: %s", path, e)
            return None

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, session_id: str | None, payload: dict) -> SessionSnapshot:
        """Fold one host payload into the session's snapshot and persist it.

        `session_id=None` takes the id from the payload.
        """
        status = parse_status_input(payload)
        if session_id:
            status = replace(status, session_id=session_id)
        return self.update_input(status)

    def update_input(self, status: StatusInput) -> SessionSnapshot:
        if not self._config.enable_cost_persistence:
            return SessionSnapshot.new("disabled")
        if not status.session_id:
            raise StorageError("No session ID found in input data")

        session_id = status.session_id
        snapshot = self.get(session_id) or SessionSnapshot.new(session_id)

        now = utc_now()
        snapshot.meta.session_id = session_id
        snapshot.meta.project_path = _determine_project_path(status, snapshot.meta.project_path)
        snapshot.meta.last_update_time = now
        if snapshot.meta.created_at is None:
            snapshot.meta.created_at = now

        snapshot.latest = sanitize_latest(status.raw)

        if status.cost is not None:
            snapshot.history.cost = apply_cost(snapshot.history.cost, status.cost)

        if status.transcript_path:
            try:
                self._advance_transcript(snapshot, status.transcript_path)
            except TranscriptReadError as e:
                logger.warning("Failed to update token usage for session %s: %s", session_id, e)

        tokens = snapshot.history.tokens
        timestamp = status.timestamp or (tokens.last_timestamp if tokens else None)
        _update_model_usage(snapshot.history, status.model, timestamp)

        self._save(snapshot)
        return snapshot

    def _advance_transcript(self, snapshot: SessionSnapshot, transcript_path: str):
        result = advance(transcript_path, snapshot.transcript_state, snapshot.history.tokens)
        snapshot.transcript_state = result.state
        snapshot.history.tokens = result.tokens
        if result.lines_read:
            logger.debug(
                "Read %d transcript lines for session %s (offset %d)",
                result.lines_read, snapshot.meta.session_id, result.state.processed_offset,
            )

    def _save(self, snapshot: SessionSnapshot):
        """Write to a private temp file in the same directory, then rename over the target."""
        if not self._config.enable_cost_persistence:
            return

        path = self.session_file_path(snapshot.meta.session_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f"{path.name}.", suffix=TEMP_SUFFIX)
        except OSError as e:
            raise StorageError(f"Failed to persist snapshot {path}: {e}") from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(orjson.dumps(snapshot.to_dict(), option=orjson.OPT_INDENT_2))
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                logger.debug("Failed to remove temp file %s", tmp_path, exc_info=True)
            raise StorageError(f"Failed to persist snapshot {path}: {e}") from e

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def cleanup(self, retention_days: int | None = None) -> int:
        """Remove snapshots not modified within `retention_days`.

        Temp files left behind by interrupted writes age out the same way.
        None uses the configured expiry; 0 or less disables the sweep.
        Returns the number of files removed.
        """
        if retention_days is None:
            retention_days = self._config.session_expiry_days
        if not retention_days or retention_days <= 0:
            return 0

        sessions_dir = self._paths.sessions_dir
        if not sessions_dir.is_dir():
            return 0

        cutoff = time.time() - retention_days * SECONDS_PER_DAY
        removed = 0
        for path in [*sessions_dir.glob("*.json"), *sessions_dir.glob(f"*{TEMP_SUFFIX}")]:
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
            except OSError:
                logger.debug("Failed to remove expired snapshot %s", path, exc_info=True)
        if removed:
            logger.info("Removed %d expired session snapshots from %s", removed, sessions_dir)
        return removed


def _determine_project_path(status: StatusInput, existing: str | None) -> str | None:
    if status.project_dir:
        return status.project_dir
    if status.cwd:
        return status.cwd
    if existing:
        return existing
    try:
        return os.getcwd()
    except OSError:
        return None


def _update_model_usage(history: SessionHistory, model: ModelInfo | None, timestamp: str | None):
    """Insert the model, or refresh it; missing fields never erase known values."""
    if model is None:
        return
    for entry in history.model_usage:
        if entry.id == model.id:
            if model.display_name:
                entry.display_name = model.display_name
            if timestamp:
                entry.last_used_at = timestamp
            return
    history.model_usage.append(
        ModelUsageEntry(id=model.id, display_name=model.display_name, last_used_at=timestamp)
    )
