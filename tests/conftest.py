"""Shared test fixtures for statusline-pro."""

from pathlib import Path

import pytest

from statusline_pro.services.runtime import StorageRuntime, reset_default_runtime
from statusline_pro.services.snapshot_store import SnapshotStore
from statusline_pro.types import StorageConfig

from helpers import PROJECT_ID


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep tests away from the real ~/.claude and the shared runtime."""
    monkeypatch.delenv("STATUSLINE_STORAGE_PATH", raising=False)
    monkeypatch.delenv("STATUSLINE_DEBUG", raising=False)
    reset_default_runtime()
    yield
    reset_default_runtime()


@pytest.fixture
def storage_root(tmp_path) -> Path:
    return tmp_path / ".claude"


@pytest.fixture
def storage_config(storage_root) -> StorageConfig:
    return StorageConfig(storage_path=storage_root)


@pytest.fixture
def runtime(storage_config) -> StorageRuntime:
    return StorageRuntime(storage_config, project_id=PROJECT_ID)


@pytest.fixture
def store(storage_config) -> SnapshotStore:
    return SnapshotStore(storage_config, PROJECT_ID)


@pytest.fixture
def sessions_dir(storage_root) -> Path:
    return storage_root / "projects" / PROJECT_ID / "statusline-pro" / "sessions"


@pytest.fixture
def transcript_path(tmp_path) -> Path:
    """Location of a (not yet created) transcript under a Claude projects dir."""
    project_dir = tmp_path / "transcripts" / "projects" / PROJECT_ID
    project_dir.mkdir(parents=True)
    return project_dir / "session-1.jsonl"
