"""Session service exports."""

from .locks import SessionLockRegistry
from .manager import GameManager
from .notifications import GameStateInfo, LoggingSink, MemorySink, NotificationSink, NullSink
from .requests import FireRequest, ResetRequest, StatusRequest, derive_session_key
from .store import InMemorySessionStore, SessionStore

__all__ = [
    "FireRequest",
    "GameManager",
    "GameStateInfo",
    "InMemorySessionStore",
    "LoggingSink",
    "MemorySink",
    "NotificationSink",
    "NullSink",
    "ResetRequest",
    "SessionLockRegistry",
    "SessionStore",
    "StatusRequest",
    "derive_session_key",
]
