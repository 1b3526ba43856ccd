"""Remote task gateway: typed client over the Browser Use task API. Stateless, no retries."""

import logging
from typing import Any, Iterable, Protocol

import pydantic

from bonkagent.errors import UpstreamDomainError, ValidationError
from bonkagent.http import request_json
from bonkagent.tasks.models import CreatedTask, TaskDetail

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.browser-use.com/api/v1"
DEFAULT_TIMEOUT = 30.0


class TaskGateway(Protocol):
    """Request/response contract the controller drives."""

    async def create(
        self,
        description: str,
        allowed_domains: Iterable[str] = (),
        secrets: dict[str, str] | None = None,
        output_schema: Any = None,
        model: str | None = None,
    ) -> CreatedTask:
        """Create a remote task. Returns at least its id."""
        ...

    async def get(self, task_id: str) -> TaskDetail:
        """Full detail: status, steps, output, live URL."""
        ...

    async def get_status(self, task_id: str) -> str:
        """Cheap status-only probe."""
        ...

    async def get_screenshots(self, task_id: str) -> list[str]:
        """Ordered screenshot references, independent of the step list."""
        ...

    async def pause(self, task_id: str) -> Any: ...

    async def resume(self, task_id: str) -> Any: ...

    async def stop(self, task_id: str) -> Any: ...


def merge_allowed_domains(defaults: Iterable[str], extra: Iterable[str] | None) -> list[str]:
    """Union of the default domains and caller domains, defaults first, duplicate-free.

    Callers can widen the set but never narrow it below the defaults.
    """
    merged: list[str] = []
    seen: set[str] = set()
    for domain in [*defaults, *(extra or [])]:
        d = (domain or "").strip().lower()
        if not d or d in seen:
            continue
        seen.add(d)
        merged.append(d)
    return merged


def _validate(model: Any, data: Any) -> Any:
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise UpstreamDomainError(
            f"Malformed {model.__name__} payload", details=str(e)
        ) from e


def _parse_status(data: Any) -> str:
    if isinstance(data, str):
        return data.strip().lower()
    if isinstance(data, dict) and isinstance(data.get("status"), str):
        return data["status"].strip().lower()
    raise UpstreamDomainError("Unexpected task status payload", details=data)


def _parse_screenshots(data: Any) -> list[str]:
    items = data.get("screenshots") if isinstance(data, dict) else data
    if not isinstance(items, list):
        return []
    screenshots: list[str] = []
    for item in items:
        if isinstance(item, dict):
            item = item.get("url") or item.get("screenshot") or ""
        screenshots.append(str(item) if item else "")
    return screenshots


class BrowserUseGateway:
    """TaskGateway implementation for the Browser Use cloud API."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        default_allowed_domains: Iterable[str] = (),
        default_model: str = "gpt-4o",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._default_domains = list(default_allowed_domains)
        self._default_model = default_model
        self._timeout = timeout

    @property
    def default_allowed_domains(self) -> list[str]:
        return list(self._default_domains)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key or ''}"}

    async def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        return await request_json(
            method,
            f"{self._base_url}{path}",
            headers=self._headers(),
            timeout=self._timeout,
            service="Browser Use API",
            **kwargs,
        )

    async def create(
        self,
        description: str,
        allowed_domains: Iterable[str] = (),
        secrets: dict[str, str] | None = None,
        output_schema: Any = None,
        model: str | None = None,
    ) -> CreatedTask:
        """Create a task. Domains are widened to include the defaults."""
        if not description or not description.strip():
            raise ValidationError("Task description is required")
        domains = merge_allowed_domains(self._default_domains, allowed_domains)
        llm_model = model or self._default_model
        body = {
            "task": description,
            "allowed_domains": domains,
            "secrets": dict(secrets or {}),
            "structured_output_json": output_schema,
            "llm_model": llm_model,
            "use_adblock": True,
            "use_proxy": True,
            "highlight_elements": True,
            "save_browser_data": True,
        }
        # Secret values stay out of the log; only their names are recorded.
        logger.info(
            "Creating task (model=%s, %d allowed domains, secrets=%s)",
            llm_model,
            len(domains),
            sorted((secrets or {}).keys()),
        )
        data = await self._call("POST", "/run-task", json=body)
        if not isinstance(data, dict) or not data.get("id"):
            raise UpstreamDomainError("Task API returned no task id", details=data)
        return _validate(CreatedTask, data)

    async def get(self, task_id: str) -> TaskDetail:
        data = await self._call("GET", f"/task/{task_id}")
        if not isinstance(data, dict):
            raise UpstreamDomainError("Unexpected task detail payload", details=data)
        data.setdefault("id", task_id)
        return _validate(TaskDetail, data)

    async def get_status(self, task_id: str) -> str:
        return _parse_status(await self._call("GET", f"/task/{task_id}/status"))

    async def get_screenshots(self, task_id: str) -> list[str]:
        return _parse_screenshots(await self._call("GET", f"/task/{task_id}/screenshots"))

    async def pause(self, task_id: str) -> Any:
        return await self._call("PUT", "/pause-task", params={"task_id": task_id})

    async def resume(self, task_id: str) -> Any:
        return await self._call("PUT", "/resume-task", params={"task_id": task_id})

    async def stop(self, task_id: str) -> Any:
        return await self._call("PUT", "/stop-task", params={"task_id": task_id})

    async def get_auth_info(self) -> Any:
        """Account info for the configured key (GET /auth/me)."""
        return await self._call("GET", "/auth/me")
