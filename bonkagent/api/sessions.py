"""Vendor browser-session routes: lifecycle per provider, plus lazy debug/recording/logs."""

from typing import Any

from fastapi import APIRouter, Body, Depends

from bonkagent.api.deps import get_services
from bonkagent.api.errors import failure_message
from bonkagent.services import Services
from bonkagent.sessions.models import (
    BrowserSession,
    DebugLinks,
    LogEntry,
    Recording,
    SessionInsights,
)

router = APIRouter(prefix="/browser-sessions", tags=["browser-sessions"])

# Suffix routes are registered first so /{session_id}/debug is not read as /{provider}/{session_id}.


@router.get("/{session_id}/debug", response_model=DebugLinks)
async def get_debug_links(
    session_id: str, provider: str | None = None, services: Services = Depends(get_services)
) -> DebugLinks:
    with failure_message("Failed to get debug links"):
        return await services.sessions.debug_links(session_id, provider)


@router.get("/{session_id}/recording", response_model=Recording)
async def get_recording(
    session_id: str, provider: str | None = None, services: Services = Depends(get_services)
) -> Recording:
    with failure_message("Failed to get recording"):
        return await services.sessions.recording(session_id, provider)


@router.get("/{session_id}/logs", response_model=list[LogEntry])
async def get_logs(
    session_id: str, provider: str | None = None, services: Services = Depends(get_services)
) -> list[LogEntry]:
    with failure_message("Failed to get logs"):
        return await services.sessions.logs(session_id, provider)


@router.get("/{session_id}/insights", response_model=SessionInsights)
async def get_insights(
    session_id: str, provider: str | None = None, services: Services = Depends(get_services)
) -> SessionInsights:
    return await services.sessions.insights(session_id, provider)


@router.post("/{provider}", response_model=BrowserSession)
async def create_session(
    provider: str,
    options: dict[str, Any] | None = Body(default=None),
    services: Services = Depends(get_services),
) -> BrowserSession:
    with failure_message(f"Failed to create {provider} session"):
        return await services.sessions.create(provider, options)


@router.get("/{provider}", response_model=list[BrowserSession])
async def list_sessions(
    provider: str, services: Services = Depends(get_services)
) -> list[BrowserSession]:
    with failure_message(f"Failed to get {provider} sessions"):
        return await services.sessions.list_sessions(provider)


@router.get("/{provider}/{session_id}", response_model=BrowserSession)
async def get_session(
    provider: str, session_id: str, services: Services = Depends(get_services)
) -> BrowserSession:
    with failure_message(f"Failed to get {provider} session"):
        return await services.sessions.get(provider, session_id)


@router.delete("/{provider}/{session_id}")
async def release_session(
    provider: str, session_id: str, services: Services = Depends(get_services)
) -> dict[str, bool]:
    with failure_message(f"Failed to release {provider} session"):
        await services.sessions.release(provider, session_id)
    return {"success": True}
