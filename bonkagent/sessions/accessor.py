"""SessionAccessor: lazy, independent reads of a session's debug links, recording and logs."""

import asyncio
import logging
from typing import Any

from bonkagent.errors import DashboardError, UnsupportedOperation, ValidationError
from bonkagent.sessions.models import (
    BrowserSession,
    DebugLinkProvider,
    DebugLinks,
    LogEntry,
    LogProvider,
    Recording,
    RecordingProvider,
    SessionInsights,
    SessionProvider,
)

logger = logging.getLogger(__name__)


class SessionAccessor:
    """Routes session calls to the named provider. Nothing here is polled or cached."""

    def __init__(
        self, providers: dict[str, SessionProvider], default_provider: str = "browserbase"
    ) -> None:
        self._providers = providers
        self._default = default_provider

    def provider(self, name: str | None = None) -> SessionProvider:
        key = (name or self._default).lower()
        provider = self._providers.get(key)
        if provider is None:
            raise ValidationError(f"Unknown browser session provider {key!r}")
        return provider

    async def create(self, provider: str, options: dict[str, Any] | None = None) -> BrowserSession:
        return await self.provider(provider).create(options)

    async def get(self, provider: str, session_id: str) -> BrowserSession:
        return await self.provider(provider).get(session_id)

    async def list_sessions(self, provider: str) -> list[BrowserSession]:
        return await self.provider(provider).list_sessions()

    async def release(self, provider: str, session_id: str) -> bool:
        return await self.provider(provider).release(session_id)

    async def debug_links(self, session_id: str, provider: str | None = None) -> DebugLinks:
        p = self.provider(provider)
        if not isinstance(p, DebugLinkProvider):
            raise UnsupportedOperation(f"{p.name} sessions have no debug links")
        return await p.debug(session_id)

    async def recording(self, session_id: str, provider: str | None = None) -> Recording:
        p = self.provider(provider)
        if not isinstance(p, RecordingProvider):
            raise UnsupportedOperation(f"{p.name} sessions have no recordings")
        return await p.recording(session_id)

    async def logs(self, session_id: str, provider: str | None = None) -> list[LogEntry]:
        p = self.provider(provider)
        if not isinstance(p, LogProvider):
            raise UnsupportedOperation(f"{p.name} sessions have no logs")
        return await p.logs(session_id)

    async def insights(self, session_id: str, provider: str | None = None) -> SessionInsights:
        """Fetch debug links, recording and logs together; each part fails on its own."""
        name = self.provider(provider).name
        parts = {
            "debug": self.debug_links(session_id, name),
            "recording": self.recording(session_id, name),
            "logs": self.logs(session_id, name),
        }
        results = await asyncio.gather(*parts.values(), return_exceptions=True)
        out = SessionInsights(session_id=session_id, provider=name)
        for part, res in zip(parts, results):
            if isinstance(res, DashboardError):
                logger.info("Session %s %s unavailable: %s", session_id, part, res)
                out.errors[part] = res.message
            elif isinstance(res, BaseException):
                raise res
            else:
                setattr(out, part, res)
        return out
