"""Status line for Claude Code sessions with persisted per-session usage."""

__version__ = "0.1.0"
