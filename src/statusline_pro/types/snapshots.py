"""Persisted per-session snapshot types."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp ("2026-02-13T12:00:00.000Z"), None if unusable."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def as_int(value: Any) -> int:
    """Coerce a JSON number to a non-negative int; anything else is 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return max(0, int(value))


def as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return max(0.0, float(value))


def as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _drop_none(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class CostMetrics:
    total_cost_usd: float = 0.0
    total_duration_ms: int = 0
    total_api_duration_ms: int = 0
    total_lines_added: int = 0
    total_lines_removed: int = 0

    @classmethod
    def from_payload(cls, data: Any) -> "CostMetrics":
        """Build metrics from a host `cost` block; absent or invalid fields become 0."""
        if not isinstance(data, dict):
            return cls()
        return cls(
            total_cost_usd=as_float(data.get("total_cost_usd")),
            total_duration_ms=as_int(data.get("total_duration_ms")),
            total_api_duration_ms=as_int(data.get("total_api_duration_ms")),
            total_lines_added=as_int(data.get("total_lines_added")),
            total_lines_removed=as_int(data.get("total_lines_removed")),
        )

    def plus(self, other: "CostMetrics") -> "CostMetrics":
        return CostMetrics(
            total_cost_usd=self.total_cost_usd + other.total_cost_usd,
            total_duration_ms=self.total_duration_ms + other.total_duration_ms,
            total_api_duration_ms=self.total_api_duration_ms + other.total_api_duration_ms,
            total_lines_added=self.total_lines_added + other.total_lines_added,
            total_lines_removed=self.total_lines_removed + other.total_lines_removed,
        )

    def to_dict(self) -> dict:
        return {
            "total_cost_usd": self.total_cost_usd,
            "total_duration_ms": self.total_duration_ms,
            "total_api_duration_ms": self.total_api_duration_ms,
            "total_lines_added": self.total_lines_added,
            "total_lines_removed": self.total_lines_removed,
        }


@dataclass(frozen=True)
class CostHistory:
    """Cost buckets: live `current`, folded prior cycles, and their sum."""
    current: CostMetrics = field(default_factory=CostMetrics)
    accumulated: CostMetrics = field(default_factory=CostMetrics)
    total: CostMetrics = field(default_factory=CostMetrics)

    @classmethod
    def from_dict(cls, data: Any) -> "CostHistory":
        if not isinstance(data, dict):
            return cls()
        return cls(
            current=CostMetrics.from_payload(data.get("current")),
            accumulated=CostMetrics.from_payload(data.get("accumulated")),
            total=CostMetrics.from_payload(data.get("total")),
        )

    def to_dict(self) -> dict:
        return {
            "current": self.current.to_dict(),
            "accumulated": self.accumulated.to_dict(),
            "total": self.total.to_dict(),
        }


@dataclass(frozen=True)
class TokenHistory:
    """Token figures of the last usage record seen in the transcript."""
    input: int = 0
    output: int = 0
    cache_creation_input: int = 0
    cache_read_input: int = 0
    context_used: int = 0
    last_message_uuid: Optional[str] = None
    last_timestamp: Optional[str] = None

    @classmethod
    def from_usage(
        cls,
        usage: dict,
        message_uuid: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> "TokenHistory":
        input_tokens = as_int(usage.get("input_tokens"))
        output_tokens = as_int(usage.get("output_tokens"))
        cache_creation = as_int(usage.get("cache_creation_input_tokens"))
        cache_read = as_int(usage.get("cache_read_input_tokens"))
        return cls(
            input=input_tokens,
            output=output_tokens,
            cache_creation_input=cache_creation,
            cache_read_input=cache_read,
            context_used=input_tokens + output_tokens + cache_creation + cache_read,
            last_message_uuid=message_uuid,
            last_timestamp=timestamp,
        )

    @classmethod
    def from_dict(cls, data: Any) -> Optional["TokenHistory"]:
        if not isinstance(data, dict):
            return None
        return cls(
            input=as_int(data.get("input")),
            output=as_int(data.get("output")),
            cache_creation_input=as_int(data.get("cache_creation_input")),
            cache_read_input=as_int(data.get("cache_read_input")),
            context_used=as_int(data.get("context_used")),
            last_message_uuid=as_str(data.get("last_message_uuid")),
            last_timestamp=as_str(data.get("last_timestamp")),
        )

    def to_dict(self) -> dict:
        return _drop_none({
            "input": self.input,
            "output": self.output,
            "cache_creation_input": self.cache_creation_input,
            "cache_read_input": self.cache_read_input,
            "context_used": self.context_used,
            "last_message_uuid": self.last_message_uuid,
            "last_timestamp": self.last_timestamp,
        })


@dataclass
class ModelUsageEntry:
    id: str
    display_name: Optional[str] = None
    last_used_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["ModelUsageEntry"]:
        if not isinstance(data, dict) or not as_str(data.get("id")):
            return None
        return cls(
            id=data["id"],
            display_name=as_str(data.get("display_name")),
            last_used_at=as_str(data.get("last_used_at")),
        )

    def to_dict(self) -> dict:
        return _drop_none({
            "id": self.id,
            "display_name": self.display_name,
            "last_used_at": self.last_used_at,
        })


@dataclass(frozen=True)
class TranscriptState:
    """Resumable bookmark into an append-only transcript file."""
    transcript_path: Optional[str] = None
    processed_offset: int = 0
    processed_messages: int = 0
    last_message_uuid: Optional[str] = None
    last_timestamp: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "TranscriptState":
        if not isinstance(data, dict):
            return cls()
        return cls(
            transcript_path=as_str(data.get("transcript_path")),
            processed_offset=as_int(data.get("processed_offset")),
            processed_messages=as_int(data.get("processed_messages")),
            last_message_uuid=as_str(data.get("last_message_uuid")),
            last_timestamp=as_str(data.get("last_timestamp")),
        )

    def to_dict(self) -> dict:
        return _drop_none({
            "transcript_path": self.transcript_path,
            "processed_offset": self.processed_offset,
            "processed_messages": self.processed_messages,
            "last_message_uuid": self.last_message_uuid,
            "last_timestamp": self.last_timestamp,
        })


@dataclass
class SessionMeta:
    session_id: str
    project_path: Optional[str] = None
    created_at: Optional[datetime] = None
    last_update_time: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Any) -> "SessionMeta":
        if not isinstance(data, dict) or not as_str(data.get("session_id")):
            raise ValueError("snapshot meta is missing session_id")
        return cls(
            session_id=data["session_id"],
            project_path=as_str(data.get("project_path")),
            created_at=parse_timestamp(data.get("created_at")),
            last_update_time=parse_timestamp(data.get("last_update_time")),
        )

    def to_dict(self) -> dict:
        return _drop_none({
            "session_id": self.session_id,
            "project_path": self.project_path,
            "created_at": format_timestamp(self.created_at),
            "last_update_time": format_timestamp(self.last_update_time),
        })


@dataclass
class SessionHistory:
    cost: CostHistory = field(default_factory=CostHistory)
    tokens: Optional[TokenHistory] = None
    model_usage: list[ModelUsageEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "SessionHistory":
        if not isinstance(data, dict):
            return cls()
        raw_usage = data.get("model_usage")
        entries = [ModelUsageEntry.from_dict(item) for item in raw_usage] if isinstance(raw_usage, list) else []
        return cls(
            cost=CostHistory.from_dict(data.get("cost")),
            tokens=TokenHistory.from_dict(data.get("tokens")),
            model_usage=[e for e in entries if e is not None],
        )

    def to_dict(self) -> dict:
        return {
            "cost": self.cost.to_dict(),
            "tokens": self.tokens.to_dict() if self.tokens is not None else None,
            "model_usage": [entry.to_dict() for entry in self.model_usage],
        }


@dataclass
class SessionSnapshot:
    meta: SessionMeta
    latest: dict = field(default_factory=dict)
    history: SessionHistory = field(default_factory=SessionHistory)
    transcript_state: TranscriptState = field(default_factory=TranscriptState)

    @classmethod
    def new(cls, session_id: str) -> "SessionSnapshot":
        now = utc_now()
        return cls(meta=SessionMeta(session_id=session_id, created_at=now, last_update_time=now))

    @classmethod
    def from_dict(cls, data: Any) -> "SessionSnapshot":
        """Rebuild a snapshot from its JSON form. Unknown fields are ignored.

        Raises ValueError when the document has no usable `meta.session_id`.
        """
        if not isinstance(data, dict):
            raise ValueError("snapshot document is not an object")
        latest = data.get("latest")
        return cls(
            meta=SessionMeta.from_dict(data.get("meta")),
            latest=latest if isinstance(latest, dict) else {},
            history=SessionHistory.from_dict(data.get("history")),
            transcript_state=TranscriptState.from_dict(data.get("transcript_state")),
        )

    def to_dict(self) -> dict:
        return {
            "meta": self.meta.to_dict(),
            "latest": self.latest,
            "history": self.history.to_dict(),
            "transcript_state": self.transcript_state.to_dict(),
        }
