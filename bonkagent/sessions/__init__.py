"""Vendor browser sessions (Steel, Browserbase) and lazy access to their debug data."""

from bonkagent.sessions.accessor import SessionAccessor
from bonkagent.sessions.browserbase import BrowserbaseSessions
from bonkagent.sessions.models import (
    BrowserSession,
    DebugLinks,
    LogEntry,
    Recording,
    SessionInsights,
    SessionProvider,
)
from bonkagent.sessions.steel import SteelSessions

__all__ = [
    "BrowserSession",
    "BrowserbaseSessions",
    "DebugLinks",
    "LogEntry",
    "Recording",
    "SessionAccessor",
    "SessionInsights",
    "SessionProvider",
    "SteelSessions",
]
