"""Fragment merge rules for partial, eventually-consistent task responses.

Each field follows its own "if newly present, adopt" rule; nothing here blindly
overwrites state the dashboard has already rendered.
"""

from typing import Any, Callable, Sequence

from bonkagent.tasks.models import RemoteStep, TaskStep

# (steps, screenshots) -> number of screenshots attached. Mutates steps in place.
Correlator = Callable[[list[TaskStep], Sequence[str]], int]


def merge_steps(existing: list[TaskStep], reported: Sequence[RemoteStep]) -> list[TaskStep]:
    """Append steps beyond what is already known. Returns the newly appended steps.

    Already-rendered steps are never replaced or dropped, so a shorter or
    reordered upstream list cannot make the view flicker.
    """
    appended: list[TaskStep] = []
    for position in range(len(existing), len(reported)):
        step = TaskStep.from_remote(reported[position], position)
        existing.append(step)
        appended.append(step)
    return appended


def correlate_by_position(steps: list[TaskStep], screenshots: Sequence[str]) -> int:
    """Attach screenshots to steps by list index.

    Upstream returns screenshots and steps as independent lists with no shared
    key. Excess screenshots are discarded; steps past the end of the screenshot
    list keep no screenshot. A step that already has one is left alone.
    """
    attached = 0
    for step, screenshot in zip(steps, screenshots):
        if step.screenshot is None and screenshot:
            step.screenshot = screenshot
            attached += 1
    return attached


def adopt(current: Any, reported: Any) -> Any:
    """Keep the current value once set; otherwise take a non-empty reported value."""
    if current not in (None, ""):
        return current
    if reported in (None, ""):
        return current
    return reported


def adopt_live_url(current: str | None, reported: str | None, dead_url: str | None) -> str | None:
    """Like adopt(), but never resurrect a URL whose live view already reported a disconnect."""
    if reported is not None and reported == dead_url:
        return current
    return adopt(current, reported)


def compute_progress(step_count: int, finished: bool, step_budget: int = 20) -> float:
    """Crude progress heuristic: steps over a fixed budget, capped at 99 until finished."""
    if finished:
        return 100.0
    if step_budget <= 0:
        return 0.0
    return float(min(step_count * 100 / step_budget, 99))
