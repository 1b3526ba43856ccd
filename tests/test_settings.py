"""Tests for bonkagent.settings."""

from pathlib import Path

import pytest

from bonkagent import settings


@pytest.fixture(autouse=True)
def _fresh_cache():
    settings.reload_settings()
    yield
    settings.reload_settings()


def test_defaults_without_file(tmp_path: Path) -> None:
    result = settings.load_settings(tmp_path)
    assert result["tasks"]["poll_interval"] == 3.0
    assert result["server"]["port"] == 4000
    assert "solscan.io" in result["tasks"]["default_allowed_domains"]


def test_yaml_overrides_are_deep_merged(tmp_path: Path) -> None:
    (tmp_path / "settings.yaml").write_text(
        "tasks:\n  poll_interval: 5\nwallet:\n  commitment: finalized\n", encoding="utf-8"
    )
    result = settings.load_settings(tmp_path)
    assert result["tasks"]["poll_interval"] == 5
    assert result["tasks"]["default_model"] == "gpt-4o"
    assert result["wallet"]["commitment"] == "finalized"
    assert result["wallet"]["rpc_url"] == "https://api.mainnet-beta.solana.com"


def test_broken_yaml_falls_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / "settings.yaml").write_text("tasks: [unclosed", encoding="utf-8")
    result = settings.load_settings(tmp_path)
    assert result["tasks"]["poll_interval"] == 3.0


def test_defaults_are_copied() -> None:
    first = settings.get_default_settings()
    first["tasks"]["default_allowed_domains"].append("evil.example")
    assert "evil.example" not in settings.get_default_settings()["tasks"]["default_allowed_domains"]


def test_get_setting_dot_path() -> None:
    data = {"sessions": {"steel": {"base_url": "https://api.steel.dev"}}}
    assert settings.get_setting(data, "sessions.steel.base_url") == "https://api.steel.dev"
    assert settings.get_setting(data, "sessions.browserbase.region", "us-west-2") == "us-west-2"
