"""Type definitions for statusline-pro."""

from statusline_pro.types.snapshots import (
    CostMetrics,
    CostHistory,
    TokenHistory,
    ModelUsageEntry,
    TranscriptState,
    SessionMeta,
    SessionHistory,
    SessionSnapshot,
)
from statusline_pro.types.config import StorageConfig, StoragePaths, StatusLineConfig
from statusline_pro.types.payload import ModelInfo, StatusInput

__all__ = [
    "CostMetrics",
    "CostHistory",
    "TokenHistory",
    "ModelUsageEntry",
    "TranscriptState",
    "SessionMeta",
    "SessionHistory",
    "SessionSnapshot",
    "StorageConfig",
    "StoragePaths",
    "StatusLineConfig",
    "ModelInfo",
    "StatusInput",
]
