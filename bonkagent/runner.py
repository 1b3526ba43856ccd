"""Entry point for the dashboard backend: settings, logging, services, then serve."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from bonkagent import secrets
from bonkagent.api import create_app
from bonkagent.logging_config import setup_logging
from bonkagent.services import build_services
from bonkagent.settings import get_setting, load_settings

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def main() -> None:
    """Synchronous entry: python -m bonkagent."""
    load_dotenv(_PROJECT_ROOT / ".env")
    settings = load_settings()
    setup_logging(_PROJECT_ROOT, settings)
    services = build_services(settings, secrets.get_secret)
    app = create_app(services)
    uvicorn.run(
        app,
        host=get_setting(settings, "server.host", "127.0.0.1"),
        port=int(get_setting(settings, "server.port", 4000)),
        log_config=None,
    )


__all__ = ["main"]
