"""Local storage for voicecmd."""

from .history_store import CommandHistoryStore

__all__ = ["CommandHistoryStore"]
