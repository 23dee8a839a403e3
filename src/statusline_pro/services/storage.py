"""Process-level entry points into the snapshot store.

Every call builds a SnapshotStore from the shared StorageRuntime. The `a*`
variants run the blocking filesystem work in a worker thread so they can be
awaited from an event loop.
"""

import asyncio
import logging

from statusline_pro.services.runtime import StorageRuntime, get_default_runtime
from statusline_pro.services.snapshot_store import SnapshotStore
from statusline_pro.types.config import StorageConfig
from statusline_pro.types.snapshots import SessionSnapshot, TokenHistory

logger = logging.getLogger(__name__)


def initialize_storage(
    config: StorageConfig,
    project_id: str | None = None,
    runtime: StorageRuntime | None = None,
) -> SnapshotStore:
    """Record settings on the runtime, create directories, sweep old snapshots.

    Raises StorageError when the storage directories cannot be created.
    """
    runtime = runtime or get_default_runtime()
    runtime.set_config(config)
    if project_id:
        runtime.set_project_id(project_id)

    store = SnapshotStore.from_runtime(runtime)
    logger.debug("Storage initialised at %s", store.paths.sessions_dir)
    if config.enable_startup_cleanup:
        store.cleanup()
    return store


def update_session_snapshot(payload: dict, runtime: StorageRuntime | None = None) -> SessionSnapshot:
    store = SnapshotStore.from_runtime(runtime or get_default_runtime())
    return store.update(None, payload)


def get_session_snapshot(session_id: str, runtime: StorageRuntime | None = None) -> SessionSnapshot | None:
    store = SnapshotStore.from_runtime(runtime or get_default_runtime())
    return store.get(session_id)


def get_session_cost_display(session_id: str, runtime: StorageRuntime | None = None) -> float:
    """Total USD across all cycles of the session, 0.0 when nothing is stored."""
    snapshot = get_session_snapshot(session_id, runtime)
    return snapshot.history.cost.total.total_cost_usd if snapshot else 0.0


def get_conversation_cost_display(session_id: str, runtime: StorageRuntime | None = None) -> float:
    """USD for the conversation display mode.

    With conversation tracking on, cycles folded after host restarts count
    towards the figure; with it off only the live cycle is shown.
    """
    runtime = runtime or get_default_runtime()
    snapshot = get_session_snapshot(session_id, runtime)
    if snapshot is None:
        return 0.0
    cost = snapshot.history.cost
    if runtime.config.enable_conversation_tracking:
        return cost.total.total_cost_usd
    return cost.current.total_cost_usd


def get_session_tokens(session_id: str, runtime: StorageRuntime | None = None) -> TokenHistory | None:
    snapshot = get_session_snapshot(session_id, runtime)
    return snapshot.history.tokens if snapshot else None


async def aupdate_session_snapshot(payload: dict, runtime: StorageRuntime | None = None) -> SessionSnapshot:
    return await asyncio.to_thread(update_session_snapshot, payload, runtime)


async def aget_session_cost_display(session_id: str, runtime: StorageRuntime | None = None) -> float:
    return await asyncio.to_thread(get_session_cost_display, session_id, runtime)


async def aget_conversation_cost_display(session_id: str, runtime: StorageRuntime | None = None) -> float:
    return await asyncio.to_thread(get_conversation_cost_display, session_id, runtime)


async def aget_session_tokens(session_id: str, runtime: StorageRuntime | None = None) -> TokenHistory | None:
    return await asyncio.to_thread(get_session_tokens, session_id, runtime)
