"""Health and credential-status routes."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from bonkagent.api.deps import get_services
from bonkagent.api.errors import failure_message
from bonkagent.api.schemas import AuthStatusResponse, HealthResponse
from bonkagent.secrets import keys_configured
from bonkagent.services import Services
from bonkagent.settings import get_setting

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@router.get("/auth/status", response_model=AuthStatusResponse)
async def auth_status(services: Services = Depends(get_services)) -> AuthStatusResponse:
    """Which provider keys are set. Values are never returned."""
    providers = get_setting(services.settings, "auth.providers", {}) or {}
    return AuthStatusResponse(
        keys_configured=keys_configured(providers, services.secrets_getter)
    )


@router.get("/auth/me")
async def account_info(services: Services = Depends(get_services)) -> Any:
    """Browser Use account behind the configured key."""
    with failure_message("Failed to get account info"):
        return await services.gateway.get_auth_info()
