"""Incremental token accounting over an append-only JSONL transcript.

The cursor remembers how many bytes of the transcript were already consumed,
so each refresh only parses what the host appended since the last one.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import orjson

from statusline_pro.errors import TranscriptReadError
from statusline_pro.types.snapshots import TokenHistory, TranscriptState, as_str

logger = logging.getLogger(__name__)

# Max size for a single JSONL line (10MB)
MAX_LINE_SIZE = 10 * 1024 * 1024
_SKIP_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class TranscriptAdvance:
    state: TranscriptState
    tokens: Optional[TokenHistory]
    lines_read: int = 0


def advance(
    transcript_path: str,
    prior: TranscriptState,
    tokens: Optional[TokenHistory] = None,
) -> TranscriptAdvance:
    """Consume the bytes appended to `transcript_path` since `prior`.

    A missing transcript is "not yet available": the prior state comes back
    unchanged, or a fresh cursor for the new path. Lines longer than
    MAX_LINE_SIZE are read in bounded chunks and skipped. The cursor starts
    over when the path changed or the file is now shorter than the stored
    offset (truncated or rotated).

    Raises TranscriptReadError when the file exists but cannot be read.
    """
    try:
        file_len = os.stat(transcript_path).st_size
    except FileNotFoundError:
        if prior.transcript_path != transcript_path:
            # The new file starts from byte 0 once it appears
            return TranscriptAdvance(state=TranscriptState(transcript_path=transcript_path), tokens=tokens)
        return TranscriptAdvance(state=prior, tokens=tokens)
    except OSError as e:
        raise TranscriptReadError(transcript_path, e) from e

    offset = prior.processed_offset
    processed = prior.processed_messages
    if prior.transcript_path != transcript_path or offset > file_len:
        logger.debug(
            "Resetting transcript cursor for %s (previous path %s, offset %d, length %d)",
            transcript_path, prior.transcript_path, offset, file_len,
        )
        offset = 0
        processed = 0

    lines_read = 0
    try:
        with open(transcript_path, "rb") as f:
            f.seek(offset)
            while True:
                line = f.readline(MAX_LINE_SIZE + 1)
                if not line:
                    break
                offset += len(line)
                processed += 1
                lines_read += 1
                if len(line) > MAX_LINE_SIZE and not line.endswith(b"\n"):
                    offset += _skip_rest_of_line(f)
                    logger.warning(
                        "Transcript line exceeds %dMB, skipping", MAX_LINE_SIZE // (1024 * 1024),
                    )
                    continue
                tokens = _apply_line(line, tokens)
    except OSError as e:
        raise TranscriptReadError(transcript_path, e) from e

    state = TranscriptState(
        transcript_path=transcript_path,
        processed_offset=offset,
        processed_messages=processed,
        last_message_uuid=tokens.last_message_uuid if tokens else prior.last_message_uuid,
        last_timestamp=tokens.last_timestamp if tokens else prior.last_timestamp,
    )
    return TranscriptAdvance(state=state, tokens=tokens, lines_read=lines_read)


def _skip_rest_of_line(f) -> int:
    """Consume the remainder of an oversized line; returns the bytes skipped."""
    skipped = 0
    while True:
        chunk = f.readline(_SKIP_CHUNK_SIZE)
        if not chunk:
            return skipped
        skipped += len(chunk)
        if chunk.endswith(b"\n"):
            return skipped


def _apply_line(line: bytes, tokens: Optional[TokenHistory]) -> Optional[TokenHistory]:
    """Return the token snapshot after one transcript line."""
    line = line.strip()
    if not line:
        return tokens

    try:
        raw = orjson.loads(line)
    except orjson.JSONDecodeError:
        return tokens
    if not isinstance(raw, dict):
        return tokens

    if is_compact_summary(raw):
        return TokenHistory(last_timestamp=as_str(raw.get("timestamp")))

    usage = usage_from_entry(raw)
    if usage is not None:
        return TokenHistory.from_usage(
            usage,
            message_uuid=as_str(raw.get("uuid")),
            timestamp=as_str(raw.get("timestamp")),
        )
    return tokens


def is_compact_summary(raw: dict) -> bool:
    return raw.get("isCompactSummary") is True


def usage_from_entry(raw: dict) -> Optional[dict]:
    """The usage block of an assistant entry, None for every other entry."""
    if raw.get("type") != "assistant":
        return None
    message = raw.get("message")
    if not isinstance(message, dict):
        return None
    usage = message.get("usage")
    return usage if isinstance(usage, dict) else None
