"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bonkagent.api import agent, automation, sessions, system, tasks, wallet
from bonkagent.api.errors import install_error_handlers
from bonkagent.services import Services
from bonkagent.settings import get_setting

logger = logging.getLogger(__name__)


def create_app(services: Services) -> FastAPI:
    """Build the app around an already-wired service container."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            logger.info("Shutting down: stopping task polling and wallet refresh")
            await services.close()

    app = FastAPI(
        title="Bonk Agent Dashboard",
        description="Remote browser agent tasks, Solana wallet reads and vendor browser sessions",
        lifespan=lifespan,
    )
    app.state.services = services
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(get_setting(services.settings, "server.cors_origins", []) or []),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)
    app.include_router(system.router)
    app.include_router(tasks.router)
    app.include_router(agent.router)
    app.include_router(wallet.router)
    app.include_router(wallet.dashboard_router)
    app.include_router(sessions.router)
    app.include_router(automation.router)
    return app
