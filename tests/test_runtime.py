"""Tests for statusline_pro.services.runtime."""

import os
import threading

from statusline_pro.services.runtime import (
    StorageRuntime,
    get_default_runtime,
    reset_default_runtime,
)
from statusline_pro.types import StorageConfig
from statusline_pro.utils.path_codec import hash_project_path


class TestProjectId:
    def test_cached_project_id_wins(self):
        runtime = StorageRuntime(project_id="-cached")
        assert runtime.resolve_project_id("/somewhere/else") == "-cached"

    def test_fallback_path_is_hashed(self):
        runtime = StorageRuntime()
        assert runtime.resolve_project_id("/nonexistent/app") == "-nonexistent-app"

    def test_cwd_is_hashed_without_fallback(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert StorageRuntime().resolve_project_id() == hash_project_path(os.getcwd())

    def test_project_id_from_transcript(self):
        runtime = StorageRuntime()
        assert runtime.set_project_id_from_transcript("/h/.claude/projects/-h-app/s.jsonl")
        assert runtime.project_id == "-h-app"

    def test_transcript_without_project_keeps_id(self):
        runtime = StorageRuntime(project_id="-kept")
        assert not runtime.set_project_id_from_transcript("/tmp/s.jsonl")
        assert not runtime.set_project_id_from_transcript(None)
        assert runtime.project_id == "-kept"


class TestConfig:
    def test_defaults(self):
        config = StorageRuntime().config
        assert config == StorageConfig()
        assert config.session_expiry_days == 30

    def test_update_config_replaces_fields(self):
        runtime = StorageRuntime()
        updated = runtime.update_config(enable_cost_persistence=False)
        assert updated.enable_cost_persistence is False
        assert runtime.config.enable_cost_persistence is False
        assert runtime.config.enable_startup_cleanup is True

    def test_concurrent_readers_see_complete_configs(self):
        runtime = StorageRuntime()
        configs = [StorageConfig(session_expiry_days=n) for n in range(1, 50)]
        seen = []

        def writer():
            for config in configs:
                runtime.set_config(config)

        def reader():
            for _ in range(200):
                seen.append(runtime.config)

        threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        valid = set(configs) | {StorageConfig()}
        assert all(config in valid for config in seen)


class TestDefaultRuntime:
    def test_shared_instance(self):
        assert get_default_runtime() is get_default_runtime()

    def test_reset(self):
        first = get_default_runtime()
        reset_default_runtime()
        assert get_default_runtime() is not first
