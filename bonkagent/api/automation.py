"""In-process Browserbase task runs."""

from fastapi import APIRouter, Depends

from bonkagent.api.deps import get_services
from bonkagent.api.errors import failure_message
from bonkagent.api.schemas import BrowserbaseTaskResponse, RunBrowserbaseTaskRequest
from bonkagent.errors import ValidationError
from bonkagent.services import Services

router = APIRouter(prefix="/browserbase", tags=["browserbase"])


@router.post("/tasks", response_model=BrowserbaseTaskResponse)
async def run_browserbase_task(
    body: RunBrowserbaseTaskRequest, services: Services = Depends(get_services)
) -> BrowserbaseTaskResponse:
    """Run a task to completion in a new Browserbase session. Blocks until the run ends."""
    if not body.task or not body.task.strip():
        raise ValidationError("Task description is required")
    with failure_message("Failed to execute Browserbase task"):
        result = await services.runner.run(body.task, body.start_url, body.llm_model)
    return BrowserbaseTaskResponse.model_validate(result.model_dump())
