"""Configuration types for the storage layer and the status line."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class StorageConfig:
    enable_conversation_tracking: bool = True
    enable_cost_persistence: bool = True
    storage_path: Optional[Path] = None  # None = ~/.claude
    session_expiry_days: Optional[int] = 30
    enable_startup_cleanup: bool = True


@dataclass(frozen=True)
class StoragePaths:
    user_config_dir: Path
    project_config_dir: Path
    sessions_dir: Path
    user_config_path: Path
    project_config_path: Path


@dataclass
class StatusLineConfig:
    preset: str = "PMBTU"
    storage: StorageConfig = field(default_factory=StorageConfig)
    sources: list[Path] = field(default_factory=list)
