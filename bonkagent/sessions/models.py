"""Browser session data models and provider capability protocols."""

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from bonkagent.errors import ValidationError


class BrowserSession(BaseModel):
    """Vendor session normalized across providers; the vendor payload is kept in raw."""

    id: str
    provider: str
    status: str | None = None
    connect_url: str | None = None
    live_url: str | None = None
    created_at: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)


class DebugLinks(BaseModel):
    """Live/debug URLs for a session. live_url is the one embedded in the dashboard."""

    session_id: str
    live_url: str | None = None
    debugger_url: str | None = None
    ws_url: str | None = None
    pages: list[dict[str, Any]] = Field(default_factory=list)


class RecordingEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    timestamp: float | None = None
    type: int | str | None = None
    data: Any = None


class Recording(BaseModel):
    """Ordered replay events and the span they cover."""

    session_id: str
    events: list[RecordingEvent] = Field(default_factory=list)
    duration_ms: float = 0.0


class LogEntry(BaseModel):
    timestamp: str | float | None = None
    tag: str = "log"
    message: str = ""


class SessionInsights(BaseModel):
    """Result of fetching every ancillary view at once. A failed part leaves an error, not a hole."""

    session_id: str
    provider: str
    debug: DebugLinks | None = None
    recording: Recording | None = None
    logs: list[LogEntry] | None = None
    errors: dict[str, str] = Field(default_factory=dict)


# --- Provider capabilities (detected with isinstance) ---


@runtime_checkable
class SessionProvider(Protocol):
    """Base contract: create, fetch, list and release vendor sessions."""

    name: str

    async def create(self, options: dict[str, Any] | None = None) -> BrowserSession: ...

    async def get(self, session_id: str) -> BrowserSession: ...

    async def list_sessions(self) -> list[BrowserSession]: ...

    async def release(self, session_id: str) -> bool: ...


@runtime_checkable
class DebugLinkProvider(Protocol):
    async def debug(self, session_id: str) -> DebugLinks: ...


@runtime_checkable
class RecordingProvider(Protocol):
    async def recording(self, session_id: str) -> Recording: ...


@runtime_checkable
class LogProvider(Protocol):
    async def logs(self, session_id: str) -> list[LogEntry]: ...


def parse_options(model: type[BaseModel], options: dict[str, Any] | None) -> Any:
    """Validate caller-supplied session options, reporting bad input as a ValidationError."""
    try:
        return model.model_validate(options or {})
    except PydanticValidationError as e:
        raise ValidationError("Invalid session options", details=str(e)) from e
