"""Typed view of the JSON payload the host sends on every refresh."""

from dataclasses import dataclass, field
from typing import Optional

from statusline_pro.types.snapshots import CostMetrics


@dataclass(frozen=True)
class ModelInfo:
    id: str
    display_name: Optional[str] = None


@dataclass(frozen=True)
class StatusInput:
    raw: dict = field(default_factory=dict)
    session_id: Optional[str] = None
    cost: Optional[CostMetrics] = None  # None when the payload has no cost block
    transcript_path: Optional[str] = None
    model: Optional[ModelInfo] = None
    project_dir: Optional[str] = None
    cwd: Optional[str] = None
    timestamp: Optional[str] = None
