"""API key resolution via OS keyring with environment fallback.

Keys are stored with the keyring CLI: ``keyring set bonkagent BROWSER_USE_API_KEY``.
"""

import logging
import os

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)
SERVICE_NAME = "bonkagent"


def get_secret(name: str) -> str | None:
    """Resolve secret: keyring -> os.environ. Sync, safe for bootstrap."""
    try:
        value = keyring.get_password(SERVICE_NAME, name)
        if value:
            return value
    except KeyringError:
        logger.debug("keyring lookup failed for %s, falling back to env", name)
    return os.environ.get(name) or None


def keys_configured(
    providers: dict[str, list[str]],
    secrets_getter=get_secret,
) -> dict[str, bool]:
    """Map provider name -> True when every secret it needs resolves. Never returns values."""
    return {
        name: all(bool(secrets_getter(secret)) for secret in required)
        for name, required in providers.items()
    }
