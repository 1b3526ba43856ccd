"""Remote browser-automation tasks: gateway client, merge rules and lifecycle controller."""

from bonkagent.tasks.controller import TaskController
from bonkagent.tasks.gateway import BrowserUseGateway, TaskGateway, merge_allowed_domains
from bonkagent.tasks.models import TaskDetail, TaskStatus, TaskStep, TaskView

__all__ = [
    "BrowserUseGateway",
    "TaskController",
    "TaskDetail",
    "TaskGateway",
    "TaskStatus",
    "TaskStep",
    "TaskView",
    "merge_allowed_domains",
]
