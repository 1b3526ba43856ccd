"""Browserbase session provider: sessions plus debug links, recordings and logs."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bonkagent.errors import UpstreamDomainError, ValidationError
from bonkagent.http import request_json
from bonkagent.sessions.models import (
    BrowserSession,
    DebugLinks,
    LogEntry,
    Recording,
    RecordingEvent,
    parse_options,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.browserbase.com/v1"


class Viewport(BaseModel):
    width: int = 1920
    height: int = 1080


class BrowserbaseSessionOptions(BaseModel):
    """Caller options; keys may be snake_case or camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    viewport: Viewport = Field(default_factory=Viewport)
    devices: list[str] = Field(default_factory=lambda: ["desktop"])
    locales: list[str] = Field(default_factory=lambda: ["en-US"])
    operating_systems: list[str] = Field(default_factory=lambda: ["windows"])
    keep_alive: bool | None = None
    recording: bool | None = None
    region: str | None = None
    task: str = "Generic task"
    metadata: dict[str, Any] = Field(default_factory=dict)


def _to_session(data: Any) -> BrowserSession:
    if not isinstance(data, dict) or not data.get("id"):
        raise UpstreamDomainError("Browserbase returned no session id", details=data)
    return BrowserSession(
        id=str(data["id"]),
        provider="browserbase",
        status=data.get("status"),
        connect_url=data.get("connectUrl"),
        created_at=data.get("createdAt"),
        raw=data,
    )


def _log_message(entry: dict[str, Any]) -> str:
    for key in ("message", "text"):
        if entry.get(key):
            return str(entry[key])
    request = entry.get("request") or {}
    params = request.get("params")
    if params:
        return str(params)
    return request.get("rawBody") or ""


def _to_log_entry(entry: Any) -> LogEntry:
    if not isinstance(entry, dict):
        return LogEntry(message=str(entry))
    request = entry.get("request") or {}
    return LogEntry(
        timestamp=entry.get("timestamp") or request.get("timestamp"),
        tag=entry.get("level") or entry.get("method") or "log",
        message=_log_message(entry),
    )


class BrowserbaseSessions:
    """SessionProvider with DebugLinkProvider, RecordingProvider and LogProvider."""

    name = "browserbase"

    def __init__(
        self,
        api_key: str | None,
        project_id: str | None,
        base_url: str = DEFAULT_BASE_URL,
        keep_alive: bool = False,
        recording: bool = False,
        region: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._project_id = project_id
        self._base_url = base_url.rstrip("/")
        self._keep_alive = keep_alive
        self._recording = recording
        self._region = region
        self._timeout = timeout

    async def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        if not (self._api_key and self._project_id):
            raise ValidationError("Browserbase API key or project id is not configured")
        return await request_json(
            method,
            f"{self._base_url}{path}",
            headers={"X-BB-API-Key": self._api_key},
            timeout=self._timeout,
            service="Browserbase API",
            **kwargs,
        )

    def _create_body(self, opts: BrowserbaseSessionOptions) -> dict[str, Any]:
        body: dict[str, Any] = {
            "projectId": self._project_id,
            "browserSettings": {
                "viewport": opts.viewport.model_dump(),
                "recordSession": self._recording if opts.recording is None else opts.recording,
                "fingerprint": {
                    "devices": opts.devices,
                    "locales": opts.locales,
                    "operatingSystems": opts.operating_systems,
                    "screen": {
                        "maxWidth": 1920,
                        "maxHeight": 1080,
                        "minWidth": 1024,
                        "minHeight": 768,
                    },
                },
            },
            "keepAlive": self._keep_alive if opts.keep_alive is None else opts.keep_alive,
            "userMetadata": {"project": "bonkagent", "task": opts.task, **opts.metadata},
        }
        region = opts.region or self._region
        if region:
            body["region"] = region
        return body

    async def create(self, options: dict[str, Any] | None = None) -> BrowserSession:
        opts = parse_options(BrowserbaseSessionOptions, options)
        data = await self._call("POST", "/sessions", json=self._create_body(opts))
        session = _to_session(data)
        logger.info("Browserbase session %s created", session.id)
        return session

    async def get(self, session_id: str) -> BrowserSession:
        return _to_session(await self._call("GET", f"/sessions/{session_id}"))

    async def list_sessions(self) -> list[BrowserSession]:
        data = await self._call("GET", "/sessions", params={"status": "RUNNING"})
        return [_to_session(item) for item in data or []]

    async def release(self, session_id: str) -> bool:
        await self._call(
            "POST",
            f"/sessions/{session_id}",
            json={"projectId": self._project_id, "status": "REQUEST_RELEASE"},
        )
        logger.info("Browserbase session %s release requested", session_id)
        return True

    async def debug(self, session_id: str) -> DebugLinks:
        data = await self._call("GET", f"/sessions/{session_id}/debug") or {}
        return DebugLinks(
            session_id=session_id,
            live_url=data.get("debuggerFullscreenUrl"),
            debugger_url=data.get("debuggerUrl"),
            ws_url=data.get("wsUrl"),
            pages=data.get("pages") or [],
        )

    async def recording(self, session_id: str) -> Recording:
        data = await self._call("GET", f"/sessions/{session_id}/recording") or []
        events = [RecordingEvent.model_validate(e) for e in data if isinstance(e, dict)]
        events.sort(key=lambda e: e.timestamp or 0)
        stamps = [e.timestamp for e in events if e.timestamp is not None]
        duration = (stamps[-1] - stamps[0]) if len(stamps) > 1 else 0.0
        return Recording(session_id=session_id, events=events, duration_ms=duration)

    async def logs(self, session_id: str) -> list[LogEntry]:
        data = await self._call("GET", f"/sessions/{session_id}/logs") or []
        return [_to_log_entry(entry) for entry in data]
