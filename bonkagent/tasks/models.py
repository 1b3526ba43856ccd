"""Task data models: upstream response shapes (Pydantic) and the controller's view (dataclasses)."""

import copy
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskStatus(StrEnum):
    """Local lifecycle state of the tracked task."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


ACTIVE_STATUSES = frozenset({TaskStatus.RUNNING, TaskStatus.PAUSED})

# Remote status strings as reported by the automation backend.
REMOTE_FINISHED = frozenset({"finished", "completed"})
REMOTE_FAILED = frozenset({"failed", "error"})
REMOTE_STOPPED = frozenset({"stopped"})
REMOTE_PROGRESSING = frozenset({"running", "paused"})


# --- Upstream response models ---


class RemoteStep(BaseModel):
    """One step as reported by the task API. Field availability varies between polls."""

    model_config = ConfigDict(extra="allow")

    id: str | int | None = None
    step: int | None = None
    action: str | None = None
    details: str | None = None
    evaluation_previous_goal: str | None = None
    next_goal: str | None = None
    url: str | None = None
    timestamp: str | None = None
    created_at: str | None = None


class TaskDetail(BaseModel):
    """Full task detail returned by GET /task/{id}."""

    model_config = ConfigDict(extra="allow")

    id: str
    status: str | None = None
    task: str | None = None
    steps: list[RemoteStep] = Field(default_factory=list)
    output: Any = None
    live_url: str | None = None
    created_at: str | None = None
    finished_at: str | None = None

    @field_validator("steps", mode="before")
    @classmethod
    def _null_steps(cls, value: Any) -> Any:
        return value or []


class CreatedTask(BaseModel):
    """Result of POST /run-task. Only the id is guaranteed."""

    model_config = ConfigDict(extra="allow")

    id: str
    status: str | None = None
    live_url: str | None = None


# --- Controller view ---


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class TaskStep:
    """One rendered step. The screenshot is attached later by position."""

    action: str
    details: str | None = None
    url: str | None = None
    timestamp: str = field(default_factory=_utc_now_iso)
    screenshot: str | None = None

    @classmethod
    def from_remote(cls, remote: RemoteStep, position: int) -> "TaskStep":
        """Normalize an upstream step; position is 0-based and labels steps with no action."""
        number = remote.step if remote.step is not None else position + 1
        action = remote.action or remote.next_goal or f"Step {number}"
        details = remote.details or remote.evaluation_previous_goal
        timestamp = remote.timestamp or remote.created_at or _utc_now_iso()
        return cls(action=action, details=details, url=remote.url, timestamp=timestamp)


@dataclass
class TaskView:
    """Everything the dashboard renders about the tracked task."""

    task_id: str | None = None
    status: TaskStatus = TaskStatus.IDLE
    progress: float = 0.0
    steps: list[TaskStep] = field(default_factory=list)
    output: Any = None
    live_url: str | None = None
    error: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def snapshot(self) -> "TaskView":
        """Deep copy handed to readers so they never alias controller state."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data
