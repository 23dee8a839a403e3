"""Layered TOML configuration: defaults < user < project < explicit file."""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

from statusline_pro.errors import ConfigError
from statusline_pro.types.config import StatusLineConfig, StorageConfig
from statusline_pro.utils.path_codec import hash_project_path

logger = logging.getLogger(__name__)

STORAGE_PATH_ENV = "STATUSLINE_STORAGE_PATH"
APP_DIR_NAME = "statusline-pro"
CONFIG_FILE_NAME = "config.toml"

# Default values
DEFAULTS = {
    "preset": "PMBTU",
    "storage/enableConversationTracking": True,
    "storage/enableCostPersistence": True,
    "storage/sessionExpiryDays": 30,
    "storage/enableStartupCleanup": True,
    "storage/storagePath": "",
}


class ConfigManager:
    """Discovers, merges and reads the status line configuration files."""

    def __init__(
        self,
        home: Path | None = None,
        project_id: str | None = None,
        custom_path: str | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self._environ = os.environ if environ is None else environ
        self._home = Path(home) if home else Path.home()
        self._project_id = project_id
        self._custom_path = Path(custom_path).expanduser() if custom_path else None
        self._values: dict | None = None
        self._sources: list[Path] = []

    def config_root(self) -> Path:
        """Directory holding user and per-project config (and, by default, snapshots)."""
        override = self._environ.get(STORAGE_PATH_ENV)
        if override:
            return Path(override).expanduser()
        return self._home / ".claude"

    def user_config_path(self) -> Path:
        return self.config_root() / APP_DIR_NAME / CONFIG_FILE_NAME

    def project_config_path(self) -> Path:
        project_id = self._project_id or hash_project_path(os.getcwd())
        return self.config_root() / "projects" / project_id / APP_DIR_NAME / CONFIG_FILE_NAME

    @property
    def sources(self) -> list[Path]:
        """Files applied by the last load, lowest priority first."""
        return list(self._sources)

    def load(self) -> StatusLineConfig:
        """Merge every layer and build the typed configuration.

        Raises ConfigError when an existing file is not valid TOML or an
        explicit config path does not exist.
        """
        merged: dict = {}
        sources: list[Path] = []

        for path in (self.user_config_path(), self.project_config_path()):
            if path.is_file():
                merged = deep_merge(merged, _load_toml(path))
                sources.append(path)

        if self._custom_path is not None:
            if not self._custom_path.is_file():
                raise ConfigError(f"Custom configuration file not found at {self._custom_path}")
            merged = deep_merge(merged, _load_toml(self._custom_path))
            sources.append(self._custom_path)

        if sources:
            logger.debug("Loaded configuration from %s", ", ".join(str(p) for p in sources))
        return self._build(merged, sources)

    def default_config(self) -> StatusLineConfig:
        """Configuration from DEFAULTS and the environment only, no files read."""
        return self._build({}, [])

    def _build(self, values: dict, sources: list[Path]) -> StatusLineConfig:
        self._values = values
        self._sources = sources
        return StatusLineConfig(
            preset=self.get_string("preset"),
            storage=self._storage_config(),
            sources=list(sources),
        )

    def get_string(self, key: str) -> str:
        val = self._lookup(key)
        return val if isinstance(val, str) else str(DEFAULTS.get(key, ""))

    def get_int(self, key: str) -> int:
        val = self._lookup(key)
        if isinstance(val, int) and not isinstance(val, bool):
            return val
        try:
            return int(val)
        except (ValueError, TypeError):
            logger.warning("Config key %s has invalid value %r, using default", key, val)
            return DEFAULTS.get(key, 0)

    def get_bool(self, key: str) -> bool:
        val = self._lookup(key)
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    def _lookup(self, key: str) -> Any:
        if self._values is None:
            self.load()
        node: Any = self._values
        for part in key.split("/"):
            if not isinstance(node, dict) or part not in node:
                return DEFAULTS.get(key)
            node = node[part]
        return node

    def _storage_config(self) -> StorageConfig:
        override = self._environ.get(STORAGE_PATH_ENV)
        configured = override or self.get_string("storage/storagePath")
        expiry = self.get_int("storage/sessionExpiryDays")
        return StorageConfig(
            enable_conversation_tracking=self.get_bool("storage/enableConversationTracking"),
            enable_cost_persistence=self.get_bool("storage/enableCostPersistence"),
            storage_path=Path(configured).expanduser() if configured else None,
            session_expiry_days=max(expiry, 0),
            enable_startup_cleanup=self.get_bool("storage/enableStartupCleanup"),
        )


def deep_merge(base: dict, overlay: dict) -> dict:
    """Merge `overlay` into a copy of `base`; tables merge, everything else replaces."""
    result = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def migrate_auto_cleanup_days(document: dict) -> dict:
    """Rename the legacy `storage.autoCleanupDays` key to `sessionExpiryDays`."""
    storage = document.get("storage")
    if not isinstance(storage, dict) or "autoCleanupDays" not in storage:
        return document
    storage = dict(storage)
    legacy = storage.pop("autoCleanupDays")
    storage.setdefault("sessionExpiryDays", legacy)
    return {**document, "storage": storage}


_MIGRATIONS = (migrate_auto_cleanup_days,)


def _load_toml(path: Path) -> dict:
    try:
        with open(path, "rb") as f:
            document = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse TOML config {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    for migrate in _MIGRATIONS:
        document = migrate(document)
    return document
