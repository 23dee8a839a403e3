"""Services for statusline-pro."""

from statusline_pro.services.snapshot_store import SnapshotStore
from statusline_pro.services.runtime import StorageRuntime, get_default_runtime
from statusline_pro.services.config_manager import ConfigManager
from statusline_pro.services.cost_accumulator import apply_cost
from statusline_pro.services.transcript_cursor import advance
from statusline_pro.services.git_resolver import GitCache, resolve_git_branch
from statusline_pro.services.storage import (
    initialize_storage,
    update_session_snapshot,
    get_session_cost_display,
    get_conversation_cost_display,
    get_session_tokens,
)

__all__ = [
    "SnapshotStore",
    "StorageRuntime",
    "get_default_runtime",
    "ConfigManager",
    "apply_cost",
    "advance",
    "GitCache",
    "resolve_git_branch",
    "initialize_storage",
    "update_session_snapshot",
    "get_session_cost_display",
    "get_conversation_cost_display",
    "get_session_tokens",
]
