"""Routes over the tracked-task controller: the dashboard's agent panel."""

from fastapi import APIRouter, Body, Depends

from bonkagent.api.deps import get_services
from bonkagent.api.schemas import CreateTaskRequest, DisconnectRequest, TaskViewOut
from bonkagent.errors import DisconnectSignal, ValidationError
from bonkagent.services import Services

router = APIRouter(prefix="/agent", tags=["agent"])


@router.get("", response_model=TaskViewOut)
async def get_view(services: Services = Depends(get_services)) -> TaskViewOut:
    return TaskViewOut.from_view(services.controller.view)


@router.post("/tasks", response_model=TaskViewOut)
async def start_task(
    body: CreateTaskRequest, services: Services = Depends(get_services)
) -> TaskViewOut:
    """Start tracking a new task. 400 while another one is running or paused."""
    if not body.task or not body.task.strip():
        raise ValidationError("Task description is required")
    view = await services.controller.start_task(
        body.task,
        body.allowed_domains,
        body.llm_model,
        wallet_address=body.wallet_address,
        output_schema=body.structured_output_json,
    )
    return TaskViewOut.from_view(view)


@router.post("/refresh", response_model=TaskViewOut)
async def refresh(services: Services = Depends(get_services)) -> TaskViewOut:
    await services.controller.poll_once()
    return TaskViewOut.from_view(services.controller.view)


@router.put("/pause", response_model=TaskViewOut)
async def pause(services: Services = Depends(get_services)) -> TaskViewOut:
    return TaskViewOut.from_view(await services.controller.pause())


@router.put("/resume", response_model=TaskViewOut)
async def resume(services: Services = Depends(get_services)) -> TaskViewOut:
    return TaskViewOut.from_view(await services.controller.resume())


@router.put("/stop", response_model=TaskViewOut)
async def stop(services: Services = Depends(get_services)) -> TaskViewOut:
    return TaskViewOut.from_view(await services.controller.stop())


@router.put("/reset", response_model=TaskViewOut)
async def reset(services: Services = Depends(get_services)) -> TaskViewOut:
    return TaskViewOut.from_view(await services.controller.reset())


@router.post("/live-view/disconnect", response_model=TaskViewOut)
async def live_view_disconnected(
    body: DisconnectRequest | None = Body(default=None),
    services: Services = Depends(get_services),
) -> TaskViewOut:
    body = body or DisconnectRequest()
    view = await services.controller.report_disconnect(
        DisconnectSignal(body.message, body.source)
    )
    return TaskViewOut.from_view(view)
