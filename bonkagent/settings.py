"""Load application settings from config/settings.yaml."""

from pathlib import Path
from typing import Any

import yaml

_DEFAULTS: dict[str, Any] = {
    "server": {
        "host": "127.0.0.1",
        "port": 4000,
        "cors_origins": ["http://localhost:3000", "http://localhost:5173"],
    },
    "logging": {
        "file": "data/logs/app.log",
        "level": "INFO",
        "log_to_console": True,
        "max_bytes": 10485760,  # 10 MB
        "backup_count": 3,
    },
    "tasks": {
        "base_url": "https://api.browser-use.com/api/v1",
        "api_key_secret": "BROWSER_USE_API_KEY",
        "poll_interval": 3.0,
        "default_model": "gpt-4o",
        # Heuristic denominator for progress; upstream reports no total step count.
        "progress_step_budget": 20,
        "timeout": 30.0,
        "default_allowed_domains": [
            "solana.com",
            "solscan.io",
            "solflare.com",
            "phantom.app",
            "bonkbutton.com",
            "letsbonk.fun",
            "birdeye.so",
            "dexscreener.com",
        ],
    },
    "wallet": {
        "rpc_url": "https://api.mainnet-beta.solana.com",
        # Overrides rpc_url when the secret is set (private RPC endpoints embed keys).
        "rpc_url_secret": "SOLANA_RPC_URL",
        "commitment": "confirmed",
        "refresh_interval": 30.0,
        "timeout": 15.0,
    },
    "sessions": {
        "steel": {
            "base_url": "https://api.steel.dev",
            "connect_url": "wss://connect.steel.dev",
            "api_key_secret": "STEEL_API_KEY",
            "timeout": 30.0,
        },
        "browserbase": {
            "base_url": "https://api.browserbase.com/v1",
            "api_key_secret": "BROWSERBASE_API_KEY",
            "project_id_secret": "BROWSERBASE_PROJECT_ID",
            "keep_alive": False,
            "recording": False,
            "region": None,
            "timeout": 30.0,
        },
    },
    "automation": {
        # In-process Browserbase runs: an OpenAI model plans, Playwright acts.
        "model": "gpt-4o",
        "openai_api_key_secret": "OPENAI_API_KEY",
        "max_steps": 15,
        "page_text_limit": 4000,
        "action_timeout_ms": 30000,
    },
    "auth": {
        # Provider name -> secrets that must all be set for the provider to count as configured.
        "providers": {
            "browserUse": ["BROWSER_USE_API_KEY"],
            "steel": ["STEEL_API_KEY"],
            "openai": ["OPENAI_API_KEY"],
            "fal": ["FAL_API_KEY"],
            "xai": ["XAI_API_KEY"],
            "browserbase": ["BROWSERBASE_API_KEY", "BROWSERBASE_PROJECT_ID"],
            "anthropic": ["ANTHROPIC_API_KEY"],
        },
    },
}

_cached: dict[str, Any] | None = None


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base recursively. Mutates base."""
    for key, value in overlay.items():
        if value is None:
            continue
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def get_default_settings() -> dict[str, Any]:
    """Return a deep copy of default settings."""
    return _deep_copy_nested(_DEFAULTS)


def get_setting(settings: dict[str, Any], path: str, default: Any = None) -> Any:
    """Get a nested value by dot path (e.g. 'tasks.poll_interval')."""
    current: Any = settings
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def reload_settings() -> None:
    """Clear the settings cache. Call after config files change."""
    global _cached
    _cached = None


def load_settings(config_dir: Path | None = None) -> dict[str, Any]:
    """Load settings from config/settings.yaml. Returns merged defaults + file values."""
    global _cached
    if _cached is not None:
        return _cached

    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent / "config"
    path = config_dir / "settings.yaml"

    result = get_default_settings()

    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                _deep_merge(result, data)
        except (yaml.YAMLError, OSError):
            pass

    _cached = result
    return result


def _deep_copy_nested(obj: Any) -> Any:
    """Return a deep copy of nested dicts/lists for defaults."""
    if isinstance(obj, dict):
        return {k: _deep_copy_nested(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_deep_copy_nested(x) for x in obj]
    return obj
