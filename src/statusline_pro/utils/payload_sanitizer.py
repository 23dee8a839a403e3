"""Turn the raw host payload into typed input and a trimmed `latest` copy."""

from typing import Any

from statusline_pro.types.payload import ModelInfo, StatusInput
from statusline_pro.types.snapshots import CostMetrics, as_str

# Token counters the host may add to the cost block; the transcript is the
# source of truth for tokens, so they are not kept in `latest`.
_COST_TOKEN_KEYS = (
    "input_tokens",
    "output_tokens",
    "total_tokens",
    "cache_read_tokens",
    "cache_write_tokens",
)


def parse_status_input(raw: Any) -> StatusInput:
    """Build a StatusInput from a decoded payload, accepting camelCase aliases."""
    if not isinstance(raw, dict):
        return StatusInput()

    cost_block = _first(raw, "cost", "sessionCost")
    return StatusInput(
        raw=raw,
        session_id=as_str(_first(raw, "session_id", "sessionId")),
        cost=CostMetrics.from_payload(cost_block) if isinstance(cost_block, dict) else None,
        transcript_path=as_str(_first(raw, "transcript_path", "transcriptPath")),
        model=_parse_model(_first(raw, "model", "modelInfo")),
        project_dir=_parse_project_dir(raw),
        cwd=as_str(_first(raw, "cwd", "currentDir")),
        timestamp=as_str(raw.get("timestamp")) or as_str(raw.get("last_update_time")),
    )


def sanitize_latest(raw: dict) -> dict:
    """Copy of the payload with cost token counters and empty values removed.

    Token counters are stripped from every `cost` object, however deeply nested.
    """
    return drop_empty(raw)


def strip_cost_tokens(cost: dict) -> dict:
    return {k: v for k, v in cost.items() if k not in _COST_TOKEN_KEYS}


def drop_empty(value: Any) -> Any:
    """Recursively remove nulls, empty containers and `cost` token counters."""
    if isinstance(value, dict):
        cleaned = {
            k: drop_empty(strip_cost_tokens(v) if k == "cost" and isinstance(v, dict) else v)
            for k, v in value.items()
        }
        return {k: v for k, v in cleaned.items() if not _is_empty(v)}
    if isinstance(value, list):
        cleaned = [drop_empty(v) for v in value]
        return [v for v in cleaned if not _is_empty(v)]
    return value


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (dict, list)) and not value)


def _first(data: dict, *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _parse_model(value: Any) -> ModelInfo | None:
    if not isinstance(value, dict):
        return None
    model_id = as_str(_first(value, "id", "model_id"))
    if model_id is None:
        return None
    return ModelInfo(
        id=model_id,
        display_name=as_str(_first(value, "display_name", "displayName")),
    )


def _parse_project_dir(raw: dict) -> str | None:
    workspace = _first(raw, "workspace", "workspaceInfo")
    if not isinstance(workspace, dict):
        return None
    return as_str(_first(workspace, "project_dir", "projectDir"))
