"""Tasks executed in-process against a Browserbase session: an LLM planner drives Playwright."""

from bonkagent.automation.models import PlannedAction, RunStep, TaskRunResult
from bonkagent.automation.planner import ActionPlanner
from bonkagent.automation.runner import BrowserbaseTaskRunner, pick_start_url

__all__ = [
    "ActionPlanner",
    "BrowserbaseTaskRunner",
    "PlannedAction",
    "RunStep",
    "TaskRunResult",
    "pick_start_url",
]
