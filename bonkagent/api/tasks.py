"""Pass-through routes for the remote task API."""

from typing import Any

from fastapi import APIRouter, Depends

from bonkagent.api.deps import get_services
from bonkagent.api.errors import failure_message
from bonkagent.api.schemas import CreateTaskRequest
from bonkagent.errors import ValidationError
from bonkagent.services import Services

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("")
async def create_task(
    body: CreateTaskRequest, services: Services = Depends(get_services)
) -> dict[str, Any]:
    """Create a task. Default domains are always included; the wallet goes in as a secret."""
    if not body.task or not body.task.strip():
        raise ValidationError("Task description is required")
    secrets = {"wallet_address": body.wallet_address} if body.wallet_address else {}
    with failure_message("Failed to create task"):
        created = await services.gateway.create(
            body.task,
            body.allowed_domains,
            secrets,
            body.structured_output_json,
            body.llm_model,
        )
    return created.model_dump()


@router.get("/{task_id}")
async def get_task(task_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    with failure_message("Failed to get task"):
        detail = await services.gateway.get(task_id)
    return detail.model_dump()


@router.get("/{task_id}/status")
async def get_task_status(task_id: str, services: Services = Depends(get_services)) -> str:
    with failure_message("Failed to get task status"):
        return await services.gateway.get_status(task_id)


@router.get("/{task_id}/screenshots")
async def get_task_screenshots(
    task_id: str, services: Services = Depends(get_services)
) -> dict[str, list[str]]:
    with failure_message("Failed to get task screenshots"):
        screenshots = await services.gateway.get_screenshots(task_id)
    return {"screenshots": screenshots}


def _ack(task_id: str, result: Any) -> dict[str, Any]:
    return {"success": True, "taskId": task_id, "result": result}


@router.put("/{task_id}/pause")
async def pause_task(task_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    with failure_message("Failed to pause task"):
        return _ack(task_id, await services.gateway.pause(task_id))


@router.put("/{task_id}/resume")
async def resume_task(task_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    with failure_message("Failed to resume task"):
        return _ack(task_id, await services.gateway.resume(task_id))


@router.put("/{task_id}/stop")
async def stop_task(task_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    with failure_message("Failed to stop task"):
        return _ack(task_id, await services.gateway.stop(task_id))
