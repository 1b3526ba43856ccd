"""Task lifecycle controller: one tracked remote task, its poll loop and its control commands.

The controller is the single writer of its TaskView. Every transition out of
{running, paused} cancels the poll loop synchronously and bumps a generation
counter; a tick that started under an older generation discards whatever its
in-flight requests return.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable

from bonkagent.errors import DashboardError, DisconnectSignal, IllegalTransition, ValidationError
from bonkagent.tasks.gateway import TaskGateway
from bonkagent.tasks.merge import (
    Correlator,
    adopt,
    adopt_live_url,
    compute_progress,
    correlate_by_position,
    merge_steps,
)
from bonkagent.tasks.models import (
    ACTIVE_STATUSES,
    REMOTE_FAILED,
    REMOTE_FINISHED,
    REMOTE_PROGRESSING,
    REMOTE_STOPPED,
    TaskDetail,
    TaskStatus,
    TaskView,
)

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[TaskView], Awaitable[None]]

DEFAULT_POLL_INTERVAL = 3.0


class TaskController:
    """Owns the state machine for one active task."""

    def __init__(
        self,
        gateway: TaskGateway,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        default_model: str = "gpt-4o",
        progress_step_budget: int = 20,
        correlate: Correlator = correlate_by_position,
    ) -> None:
        self._gateway = gateway
        self._poll_interval = poll_interval
        self._default_model = default_model
        self._step_budget = progress_step_budget
        self._correlate = correlate
        self._view = TaskView()
        self._generation = 0
        self._poll_task: asyncio.Task[None] | None = None
        self._tick_lock = asyncio.Lock()
        self._dead_live_url: str | None = None
        self._starting = False
        self._handlers: list[tuple[ChangeHandler, str]] = []

    # --- Read side ---

    @property
    def view(self) -> TaskView:
        """Copy of the current view."""
        return self._view.snapshot()

    @property
    def status(self) -> TaskStatus:
        return self._view.status

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def subscribe(self, handler: ChangeHandler, subscriber_id: str) -> None:
        """Register an async handler called with a view snapshot after every change."""
        self._handlers.append((handler, subscriber_id))

    async def _notify(self) -> None:
        if not self._handlers:
            return
        view = self._view.snapshot()
        for handler, subscriber_id in self._handlers:
            try:
                await handler(view)
            except Exception as e:
                logger.exception("Task change handler %s failed: %s", subscriber_id, e)

    # --- Polling ---

    def start_polling(self) -> None:
        """Start the poll loop if the task is active and no loop is running."""
        if not self._view.is_active or self.is_polling:
            return
        self._poll_task = asyncio.create_task(self._poll_loop(self._generation))
        logger.debug("Polling started for task %s", self._view.task_id)

    def cancel_polling(self) -> None:
        """Stop the poll loop and invalidate any tick still in flight. Synchronous."""
        self._generation += 1
        task = self._poll_task
        self._poll_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _poll_loop(self, generation: int) -> None:
        """Fixed-cadence loop. No backoff: a failing tick is skipped and retried next interval."""
        while self._generation == generation and self._view.is_active:
            await asyncio.sleep(self._poll_interval)
            if self._generation != generation:
                break
            try:
                await self.poll_once()
            except Exception as e:
                logger.exception("Poll tick for task %s failed: %s", self._view.task_id, e)

    def _is_stale(self, generation: int, task_id: str) -> bool:
        return self._generation != generation or self._view.task_id != task_id

    async def poll_once(self) -> None:
        """One tick: status probe, then detail and screenshots as needed, then merge.

        Transport and upstream errors are logged and the tick is skipped; they
        never move the task to failed.
        """
        if not self._view.is_active or self._view.task_id is None:
            return
        generation = self._generation
        task_id = self._view.task_id
        async with self._tick_lock:
            if self._is_stale(generation, task_id):
                return
            try:
                changed = await self._tick(generation, task_id)
            except DashboardError as e:
                logger.warning("Poll tick for task %s skipped: %s", task_id, e)
                return
            if changed:
                await self._notify()

    async def _tick(self, generation: int, task_id: str) -> bool:
        remote_status = await self._gateway.get_status(task_id)
        if self._is_stale(generation, task_id):
            logger.debug("Discarding stale status for task %s", task_id)
            return False

        if remote_status in REMOTE_FAILED:
            self._finish(TaskStatus.FAILED, error=f"Task {remote_status} upstream")
            return True
        if remote_status in REMOTE_STOPPED:
            self._finish(TaskStatus.FAILED, error="Task was stopped upstream")
            return True

        finished = remote_status in REMOTE_FINISHED
        changed = self._reconcile_remote_pause(remote_status)
        if not finished and remote_status not in REMOTE_PROGRESSING:
            # created / queued: nothing to merge yet.
            return changed

        detail = await self._gateway.get(task_id)
        if self._is_stale(generation, task_id):
            logger.debug("Discarding stale detail for task %s", task_id)
            return False
        changed = self._merge_detail(detail) or changed

        if self._needs_screenshots():
            screenshots = await self._fetch_screenshots(task_id)
            if self._is_stale(generation, task_id):
                return False
            if screenshots and self._correlate(self._view.steps, screenshots):
                changed = True

        progress = compute_progress(len(self._view.steps), finished, self._step_budget)
        if progress != self._view.progress:
            self._view.progress = progress
            changed = True
        if finished:
            self._finish(TaskStatus.COMPLETED)
            changed = True
        return changed

    def _reconcile_remote_pause(self, remote_status: str) -> bool:
        """Follow pause/resume performed outside this controller."""
        if remote_status == "paused" and self._view.status == TaskStatus.RUNNING:
            self._view.status = TaskStatus.PAUSED
            return True
        if remote_status == "running" and self._view.status == TaskStatus.PAUSED:
            self._view.status = TaskStatus.RUNNING
            return True
        return False

    def _merge_detail(self, detail: TaskDetail) -> bool:
        view = self._view
        appended = merge_steps(view.steps, detail.steps)
        output = adopt(view.output, detail.output)
        live_url = adopt_live_url(view.live_url, detail.live_url, self._dead_live_url)
        changed = bool(appended) or output is not view.output or live_url != view.live_url
        view.output = output
        view.live_url = live_url
        return changed

    def _needs_screenshots(self) -> bool:
        return any(step.screenshot is None for step in self._view.steps)

    async def _fetch_screenshots(self, task_id: str) -> list[str]:
        try:
            return await self._gateway.get_screenshots(task_id)
        except DashboardError as e:
            logger.warning("Screenshot fetch for task %s failed: %s", task_id, e)
            return []

    def _finish(self, status: TaskStatus, error: str | None = None) -> None:
        self.cancel_polling()
        self._view.status = status
        if status == TaskStatus.COMPLETED:
            self._view.progress = 100.0
        if error is not None:
            self._view.error = error
        logger.info("Task %s %s", self._view.task_id, status.value)

    # --- Commands ---

    async def start_task(
        self,
        description: str,
        allowed_domains: Iterable[str] | None = None,
        model: str | None = None,
        *,
        wallet_address: str | None = None,
        output_schema: Any = None,
    ) -> TaskView:
        """Create a remote task and begin tracking it.

        Allowed from idle or a terminal state (the previous task's view is
        discarded). Rejected while a task is running or paused.
        """
        if not description or not description.strip():
            raise ValidationError("Task description is required")
        if self._starting:
            raise IllegalTransition("start", "starting")
        if self._view.is_active:
            raise IllegalTransition("start", self._view.status.value)

        self._clear()
        generation = self._generation
        secrets = {"wallet_address": wallet_address} if wallet_address else {}
        self._starting = True
        try:
            created = await self._gateway.create(
                description,
                list(allowed_domains or []),
                secrets,
                output_schema,
                model or self._default_model,
            )
        except DashboardError as e:
            if self._generation == generation:
                self._view.error = f"Failed to start task: {e.message}"
                await self._notify()
            raise
        finally:
            self._starting = False

        if self._generation != generation:
            logger.info("Task %s was created after a reset; stopping it", created.id)
            await self._abandon(created.id)
            return self.view

        self._view.task_id = created.id
        self._view.status = TaskStatus.RUNNING
        self._view.live_url = created.live_url
        logger.info("Task %s started", created.id)
        await self._notify()
        await self.poll_once()
        self.start_polling()
        return self.view

    async def _abandon(self, task_id: str) -> None:
        """Best-effort stop of a remote task nobody tracks any more."""
        try:
            await self._gateway.stop(task_id)
        except DashboardError as e:
            logger.warning("Could not stop untracked task %s: %s", task_id, e)

    def _require(self, command: str, allowed: frozenset[TaskStatus]) -> str:
        if self._view.status not in allowed or self._view.task_id is None:
            raise IllegalTransition(command, self._view.status.value)
        return self._view.task_id

    async def _command(self, command: str, call: Callable[[str], Awaitable[Any]], task_id: str) -> None:
        try:
            await call(task_id)
        except DashboardError as e:
            self._view.error = f"Failed to {command} task: {e.message}"
            await self._notify()
            raise

    async def pause(self) -> TaskView:
        task_id = self._require("pause", frozenset({TaskStatus.RUNNING}))
        await self._command("pause", self._gateway.pause, task_id)
        if self._view.task_id == task_id and self._view.status == TaskStatus.RUNNING:
            self._view.status = TaskStatus.PAUSED
            self._view.error = None
            await self._notify()
        return self.view

    async def resume(self) -> TaskView:
        task_id = self._require("resume", frozenset({TaskStatus.PAUSED}))
        await self._command("resume", self._gateway.resume, task_id)
        if self._view.task_id == task_id and self._view.status == TaskStatus.PAUSED:
            self._view.status = TaskStatus.RUNNING
            self._view.error = None
            await self._notify()
        return self.view

    async def stop(self) -> TaskView:
        """Stop the remote task. Steps and output stay for inspection until reset()."""
        task_id = self._require("stop", ACTIVE_STATUSES)
        await self._command("stop", self._gateway.stop, task_id)
        if self._view.task_id == task_id and self._view.is_active:
            self.cancel_polling()
            self._view.status = TaskStatus.IDLE
            self._view.task_id = None
            self._view.live_url = None
            self._view.error = None
            logger.info("Task %s stopped", task_id)
            await self._notify()
        return self.view

    async def reset(self) -> TaskView:
        """Forget the tracked task entirely. Does not touch the remote task."""
        self._clear()
        await self._notify()
        return self.view

    async def report_disconnect(self, signal: DisconnectSignal | None = None) -> TaskView:
        """Live view lost its connection. Surfaces an error; status and polling are untouched."""
        signal = signal or DisconnectSignal()
        logger.warning(
            "Live view disconnected for task %s (source=%s)", self._view.task_id, signal.source
        )
        self._view.error = signal.message
        if self._view.live_url:
            self._dead_live_url = self._view.live_url
            self._view.live_url = None
        await self._notify()
        return self.view

    def _clear(self) -> None:
        self.cancel_polling()
        self._view = TaskView()
        self._dead_live_url = None

    async def close(self) -> None:
        """Cancel the poll loop and wait for it to exit. Called on shutdown."""
        task = self._poll_task
        self.cancel_polling()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
