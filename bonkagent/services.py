"""Service container: every collaborator built once from settings, credentials passed in explicitly."""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from bonkagent.automation import ActionPlanner, BrowserbaseTaskRunner
from bonkagent.sessions import BrowserbaseSessions, SessionAccessor, SteelSessions
from bonkagent.settings import get_setting
from bonkagent.tasks import BrowserUseGateway, TaskController
from bonkagent.tasks.models import TaskView
from bonkagent.wallet import WalletMonitor, WalletReader

logger = logging.getLogger(__name__)

SecretsGetter = Callable[[str], str | None]


@dataclass
class Services:
    settings: dict[str, Any]
    secrets_getter: SecretsGetter
    gateway: BrowserUseGateway
    controller: TaskController
    wallet_reader: WalletReader
    wallet_monitor: WalletMonitor
    sessions: SessionAccessor
    runner: BrowserbaseTaskRunner

    async def close(self) -> None:
        """Cancel background loops (task polling, wallet refresh)."""
        await self.controller.close()
        await self.wallet_monitor.stop()


def _secret(secrets_getter: SecretsGetter, name: str | None) -> str | None:
    return secrets_getter(name) if name else None


def _build_gateway(settings: dict[str, Any], secrets_getter: SecretsGetter) -> BrowserUseGateway:
    cfg = settings.get("tasks", {})
    return BrowserUseGateway(
        api_key=_secret(secrets_getter, cfg.get("api_key_secret")),
        base_url=cfg.get("base_url", "https://api.browser-use.com/api/v1"),
        default_allowed_domains=cfg.get("default_allowed_domains") or [],
        default_model=cfg.get("default_model", "gpt-4o"),
        timeout=float(cfg.get("timeout", 30.0)),
    )


def _build_wallet_reader(settings: dict[str, Any], secrets_getter: SecretsGetter) -> WalletReader:
    cfg = settings.get("wallet", {})
    rpc_url = _secret(secrets_getter, cfg.get("rpc_url_secret")) or cfg.get(
        "rpc_url", "https://api.mainnet-beta.solana.com"
    )
    return WalletReader(
        rpc_url=rpc_url,
        commitment=cfg.get("commitment", "confirmed"),
        timeout=float(cfg.get("timeout", 15.0)),
    )


def _build_browserbase(
    settings: dict[str, Any], secrets_getter: SecretsGetter
) -> BrowserbaseSessions:
    bb_cfg = get_setting(settings, "sessions.browserbase", {}) or {}
    return BrowserbaseSessions(
        api_key=_secret(secrets_getter, bb_cfg.get("api_key_secret")),
        project_id=_secret(secrets_getter, bb_cfg.get("project_id_secret")),
        base_url=bb_cfg.get("base_url", "https://api.browserbase.com/v1"),
        keep_alive=bool(bb_cfg.get("keep_alive", False)),
        recording=bool(bb_cfg.get("recording", False)),
        region=bb_cfg.get("region"),
        timeout=float(bb_cfg.get("timeout", 30.0)),
    )


def _build_sessions(
    settings: dict[str, Any], secrets_getter: SecretsGetter, browserbase: BrowserbaseSessions
) -> SessionAccessor:
    steel_cfg = get_setting(settings, "sessions.steel", {}) or {}
    steel = SteelSessions(
        api_key=_secret(secrets_getter, steel_cfg.get("api_key_secret")),
        base_url=steel_cfg.get("base_url", "https://api.steel.dev"),
        connect_url=steel_cfg.get("connect_url", "wss://connect.steel.dev"),
        timeout=float(steel_cfg.get("timeout", 30.0)),
    )
    return SessionAccessor({"steel": steel, "browserbase": browserbase})


def _build_runner(
    settings: dict[str, Any], secrets_getter: SecretsGetter, browserbase: BrowserbaseSessions
) -> BrowserbaseTaskRunner:
    cfg = settings.get("automation", {})
    planner = ActionPlanner(
        api_key=_secret(secrets_getter, cfg.get("openai_api_key_secret")),
        model=cfg.get("model", "gpt-4o"),
    )
    return BrowserbaseTaskRunner(
        browserbase,
        planner,
        max_steps=int(cfg.get("max_steps", 15)),
        page_text_limit=int(cfg.get("page_text_limit", 4000)),
        action_timeout_ms=int(cfg.get("action_timeout_ms", 30000)),
    )


async def _log_task_change(view: TaskView) -> None:
    logger.debug(
        "Task %s: %s, %d steps, progress %.0f%%",
        view.task_id,
        view.status.value,
        len(view.steps),
        view.progress,
    )


def build_services(settings: dict[str, Any], secrets_getter: SecretsGetter) -> Services:
    """Wire gateway, controller, wallet reader/monitor, sessions and the Browserbase runner."""
    gateway = _build_gateway(settings, secrets_getter)
    controller = TaskController(
        gateway,
        poll_interval=float(get_setting(settings, "tasks.poll_interval", 3.0)),
        default_model=get_setting(settings, "tasks.default_model", "gpt-4o"),
        progress_step_budget=int(get_setting(settings, "tasks.progress_step_budget", 20)),
    )
    controller.subscribe(_log_task_change, "log")
    reader = _build_wallet_reader(settings, secrets_getter)
    monitor = WalletMonitor(
        reader, refresh_interval=float(get_setting(settings, "wallet.refresh_interval", 30.0))
    )
    browserbase = _build_browserbase(settings, secrets_getter)
    return Services(
        settings=settings,
        secrets_getter=secrets_getter,
        gateway=gateway,
        controller=controller,
        wallet_reader=reader,
        wallet_monitor=monitor,
        sessions=_build_sessions(settings, secrets_getter, browserbase),
        runner=_build_runner(settings, secrets_getter, browserbase),
    )
