"""Process-wide storage settings shared by every SnapshotStore."""

import logging
import os
import threading
from dataclasses import replace

from statusline_pro.types.config import StorageConfig
from statusline_pro.utils.path_codec import extract_project_id_from_transcript, hash_project_path

logger = logging.getLogger(__name__)


class StorageRuntime:
    """Active storage configuration and resolved project id.

    Set once at startup and read by every store built afterwards. Values are
    immutable, so readers take a reference under the lock and never observe a
    half-applied update.
    """

    def __init__(self, config: StorageConfig | None = None, project_id: str | None = None):
        self._lock = threading.Lock()
        self._config = config or StorageConfig()
        self._project_id = project_id

    @property
    def config(self) -> StorageConfig:
        with self._lock:
            return self._config

    @property
    def project_id(self) -> str | None:
        with self._lock:
            return self._project_id

    def set_config(self, config: StorageConfig):
        with self._lock:
            self._config = config

    def update_config(self, **changes) -> StorageConfig:
        with self._lock:
            self._config = replace(self._config, **changes)
            return self._config

    def set_project_id(self, project_id: str | None):
        with self._lock:
            self._project_id = project_id
        logger.debug("Project id set to %s", project_id)

    def set_project_id_from_transcript(self, transcript_path: str | None) -> bool:
        """Adopt the project id encoded in a transcript path, if it has one."""
        project_id = extract_project_id_from_transcript(transcript_path or "")
        if project_id is None:
            return False
        self.set_project_id(project_id)
        return True

    def resolve_project_id(self, fallback_path: str | None = None) -> str:
        """The cached project id, else the hash of `fallback_path` or the cwd."""
        cached = self.project_id
        if cached:
            return cached
        return hash_project_path(fallback_path or os.getcwd())


_default_runtime: StorageRuntime | None = None
_default_lock = threading.Lock()


def get_default_runtime() -> StorageRuntime:
    global _default_runtime
    with _default_lock:
        if _default_runtime is None:
            _default_runtime = StorageRuntime()
        return _default_runtime


def reset_default_runtime():
    """Drop the shared runtime (tests)."""
    global _default_runtime
    with _default_lock:
        _default_runtime = None
