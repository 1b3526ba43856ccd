"""Steel browser-session provider."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from bonkagent.errors import UpstreamDomainError, ValidationError
from bonkagent.http import request_json
from bonkagent.sessions.models import BrowserSession, DebugLinks, parse_options

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.steel.dev"
DEFAULT_CONNECT_URL = "wss://connect.steel.dev"


class SteelSessionOptions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    use_proxy: bool = True
    solve_captcha: bool = True


def _to_session(data: Any, connect_url: str) -> BrowserSession:
    if not isinstance(data, dict) or not data.get("id"):
        raise UpstreamDomainError("Steel returned no session id", details=data)
    session_id = str(data["id"])
    return BrowserSession(
        id=session_id,
        provider="steel",
        status=data.get("status"),
        # The API key is appended by whoever holds it; it never leaves the server.
        connect_url=data.get("websocketUrl") or f"{connect_url}?sessionId={session_id}",
        live_url=data.get("sessionViewerUrl") or data.get("debugUrl"),
        created_at=data.get("createdAt") or data.get("created_at"),
        raw=data,
    )


class SteelSessions:
    """SessionProvider and DebugLinkProvider for Steel. Steel exposes no recordings or logs."""

    name = "steel"

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        connect_url: str = DEFAULT_CONNECT_URL,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._connect_url = connect_url
        self._timeout = timeout

    async def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        if not self._api_key:
            raise ValidationError("Steel API key is not configured")
        return await request_json(
            method,
            f"{self._base_url}{path}",
            headers={"X-API-Key": self._api_key},
            timeout=self._timeout,
            service="Steel API",
            **kwargs,
        )

    async def create(self, options: dict[str, Any] | None = None) -> BrowserSession:
        opts = parse_options(SteelSessionOptions, options)
        data = await self._call("POST", "/sessions", json=opts.model_dump())
        session = _to_session(data, self._connect_url)
        logger.info("Steel session %s created", session.id)
        return session

    async def get(self, session_id: str) -> BrowserSession:
        return _to_session(await self._call("GET", f"/sessions/{session_id}"), self._connect_url)

    async def list_sessions(self) -> list[BrowserSession]:
        data = await self._call("GET", "/sessions")
        items = data.get("sessions") if isinstance(data, dict) else data
        return [_to_session(item, self._connect_url) for item in items or []]

    async def release(self, session_id: str) -> bool:
        await self._call("DELETE", f"/sessions/{session_id}")
        logger.info("Steel session %s released", session_id)
        return True

    async def debug(self, session_id: str) -> DebugLinks:
        session = await self.get(session_id)
        return DebugLinks(
            session_id=session.id,
            live_url=session.live_url,
            debugger_url=session.raw.get("debugUrl"),
            ws_url=session.connect_url,
        )
