"""Models for in-process Browserbase task runs."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class PlannedAction(BaseModel):
    """Next browser action chosen by the planner."""

    action: Literal["goto", "click", "fill", "extract", "done"]
    url: str | None = None
    selector: str | None = None
    value: str | None = None
    reason: str | None = None
    output: Any = None


class RunStep(BaseModel):
    action: str
    details: str | None = None
    url: str | None = None
    ok: bool = True
    timestamp: str = Field(default_factory=_now)


class TaskRunResult(BaseModel):
    """Outcome of one run: the steps taken, what the planner reported and the session it ran in."""

    session_id: str
    steps: list[RunStep] = Field(default_factory=list)
    output: Any = None
    live_url: str | None = None
    completed: bool = False
