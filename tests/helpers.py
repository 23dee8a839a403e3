"""Shared test helpers."""

import json
from pathlib import Path

PROJECT_ID = "-home-wiz-projects-myapp"


def usage_line(uuid, input_tokens, output_tokens, cache_creation, cache_read,
               timestamp="2026-02-13T10:00:00.000Z"):
    """Assistant transcript entry carrying a usage block."""
    return json.dumps({
        "type": "assistant",
        "uuid": uuid,
        "timestamp": timestamp,
        "message": {
            "role": "assistant",
            "usage": {
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
                "cache_creation_input_tokens": cache_creation,
                "cache_read_input_tokens": cache_read,
            },
        },
    })


def summary_line(timestamp="2026-02-13T11:00:00.000Z"):
    """Compaction summary transcript entry."""
    return json.dumps({"isCompactSummary": True, "timestamp": timestamp})


def user_line(uuid, content="Hello"):
    return json.dumps({
        "type": "user",
        "uuid": uuid,
        "timestamp": "2026-02-13T09:59:00.000Z",
        "message": {"role": "user", "content": content},
    })


def append_lines(path: Path, lines: list[str]):
    """Append JSONL lines to a transcript, creating it if needed."""
    with open(path, "a", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")


def payload(session_id="session-1", **fields):
    data = {"session_id": session_id}
    data.update(fields)
    return data
