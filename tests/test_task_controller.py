"""Tests for bonkagent.tasks.controller: state machine, polling ticks, cancellation."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from bonkagent.errors import (
    DisconnectSignal,
    IllegalTransition,
    TransportError,
    UpstreamDomainError,
    ValidationError,
)
from bonkagent.tasks.controller import TaskController
from bonkagent.tasks.models import CreatedTask, TaskDetail, TaskStatus

STEPS = [{"action": "open solscan"}, {"action": "search wallet"}, {"action": "read accounts"}]


def _detail(steps: list[dict] | None = None, output=None, live_url=None, status="running"):
    return TaskDetail.model_validate(
        {"id": "t1", "status": status, "steps": steps or [], "output": output, "live_url": live_url}
    )


@pytest.fixture
def gateway() -> AsyncMock:
    gw = AsyncMock()
    gw.create.return_value = CreatedTask(id="t1", status="running", live_url="https://live/t1")
    gw.get_status.return_value = "running"
    gw.get.return_value = _detail(STEPS)
    gw.get_screenshots.return_value = []
    return gw


@pytest.fixture
async def controller(gateway: AsyncMock):
    # Long interval: tests drive ticks with poll_once().
    ctrl = TaskController(gateway, poll_interval=3600)
    yield ctrl
    await ctrl.close()


class TestStartAndPoll:
    @pytest.mark.asyncio
    async def test_start_then_first_tick(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        """Start creates the task and the first tick merges three steps (15% progress)."""
        view = await controller.start_task("find empty accounts", [], "model-x")

        gateway.create.assert_awaited_once()
        args = gateway.create.await_args.args
        assert args[0] == "find empty accounts"
        assert args[4] == "model-x"
        assert view.task_id == "t1"
        assert view.status == TaskStatus.RUNNING
        assert len(view.steps) == 3
        assert view.progress == 15.0
        assert view.output is None
        assert controller.is_polling

    @pytest.mark.asyncio
    async def test_finished_status_completes_and_stops_polling(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        await controller.start_task("find empty accounts", [], "model-x")
        gateway.get_status.return_value = "finished"
        gateway.get.return_value = _detail(STEPS, output="done", status="finished")

        await controller.poll_once()

        view = controller.view
        assert view.status == TaskStatus.COMPLETED
        assert view.progress == 100.0
        assert view.output == "done"
        assert not controller.is_polling

        calls_before = gateway.get_status.await_count
        await controller.poll_once()
        assert gateway.get_status.await_count == calls_before

    @pytest.mark.asyncio
    async def test_same_detail_twice_is_idempotent(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        await controller.start_task("find empty accounts")
        first = controller.view
        await controller.poll_once()
        second = controller.view
        assert len(second.steps) == len(first.steps) == 3
        assert second.progress == first.progress

    @pytest.mark.asyncio
    async def test_screenshots_attached_by_position(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        gateway.get_screenshots.return_value = ["s1", "s2"]
        view = await controller.start_task("find empty accounts")
        assert [s.screenshot for s in view.steps] == ["s1", "s2", None]

    @pytest.mark.asyncio
    async def test_output_and_live_url_adopted_once(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        gateway.create.return_value = CreatedTask(id="t1")
        gateway.get.return_value = _detail(STEPS, output="first", live_url="https://live/a")
        await controller.start_task("find empty accounts")
        gateway.get.return_value = _detail(STEPS, output="second", live_url="https://live/b")
        await controller.poll_once()
        view = controller.view
        assert view.output == "first"
        assert view.live_url == "https://live/a"

    @pytest.mark.asyncio
    async def test_queued_status_skips_detail_fetch(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        gateway.get_status.return_value = "created"
        await controller.start_task("find empty accounts")
        gateway.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_subscribers_receive_snapshots(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        seen: list[str] = []

        async def handler(view) -> None:
            seen.append(view.status.value)

        controller.subscribe(handler, "test")
        await controller.start_task("find empty accounts")
        assert seen and seen[-1] == "running"


class TestFailures:
    @pytest.mark.asyncio
    async def test_transport_error_during_poll_skips_tick(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        await controller.start_task("find empty accounts")
        gateway.get_status.side_effect = TransportError("Browser Use API is unreachable")
        await controller.poll_once()
        view = controller.view
        assert view.status == TaskStatus.RUNNING
        assert view.error is None
        assert len(view.steps) == 3

    @pytest.mark.asyncio
    async def test_upstream_failed_status_fails_task(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        await controller.start_task("find empty accounts")
        gateway.get_status.return_value = "failed"
        await controller.poll_once()
        view = controller.view
        assert view.status == TaskStatus.FAILED
        assert view.error
        assert not controller.is_polling

    @pytest.mark.asyncio
    async def test_create_failure_leaves_idle_with_error(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        gateway.create.side_effect = UpstreamDomainError("Browser Use API returned HTTP 401")
        with pytest.raises(UpstreamDomainError):
            await controller.start_task("find empty accounts")
        view = controller.view
        assert view.status == TaskStatus.IDLE
        assert view.task_id is None
        assert view.error.startswith("Failed to start task")

    @pytest.mark.asyncio
    async def test_empty_description_rejected(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        with pytest.raises(ValidationError):
            await controller.start_task("  ")
        gateway.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_command_failure_records_error(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        await controller.start_task("find empty accounts")
        gateway.pause.side_effect = TransportError("Browser Use API request timed out")
        with pytest.raises(TransportError):
            await controller.pause()
        view = controller.view
        assert view.status == TaskStatus.RUNNING
        assert view.error.startswith("Failed to pause task")


class TestCommands:
    @pytest.mark.asyncio
    async def test_pause_resume_stop(self, controller: TaskController, gateway: AsyncMock) -> None:
        await controller.start_task("find empty accounts")

        assert (await controller.pause()).status == TaskStatus.PAUSED
        gateway.pause.assert_awaited_once_with("t1")
        assert (await controller.resume()).status == TaskStatus.RUNNING
        gateway.resume.assert_awaited_once_with("t1")

        view = await controller.stop()
        gateway.stop.assert_awaited_once_with("t1")
        assert view.status == TaskStatus.IDLE
        assert view.task_id is None
        assert view.live_url is None
        assert len(view.steps) == 3
        assert not controller.is_polling

    @pytest.mark.asyncio
    async def test_illegal_commands_issue_no_gateway_calls(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        with pytest.raises(IllegalTransition):
            await controller.pause()
        with pytest.raises(IllegalTransition):
            await controller.stop()
        await controller.start_task("find empty accounts")
        with pytest.raises(IllegalTransition):
            await controller.resume()
        with pytest.raises(IllegalTransition):
            await controller.start_task("another task")

        gateway.pause.assert_not_awaited()
        gateway.resume.assert_not_awaited()
        gateway.stop.assert_not_awaited()
        assert gateway.create.await_count == 1

    @pytest.mark.asyncio
    async def test_stop_rejected_after_completion(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        await controller.start_task("find empty accounts")
        gateway.get_status.return_value = "completed"
        await controller.poll_once()
        with pytest.raises(IllegalTransition):
            await controller.stop()
        gateway.stop.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reset_clears_everything(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        await controller.start_task("find empty accounts")
        view = await controller.reset()
        assert view.status == TaskStatus.IDLE
        assert view.task_id is None
        assert view.steps == []
        assert view.progress == 0.0
        assert not controller.is_polling

    @pytest.mark.asyncio
    async def test_remote_pause_is_followed(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        await controller.start_task("find empty accounts")
        gateway.get_status.return_value = "paused"
        await controller.poll_once()
        assert controller.status == TaskStatus.PAUSED
        assert controller.is_polling


class TestCancellation:
    @pytest.mark.asyncio
    async def test_response_after_stop_is_discarded(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        """A tick in flight when stop() runs must not merge its late response."""
        await controller.start_task("find empty accounts")
        gate = asyncio.Event()

        async def delayed_status(task_id: str) -> str:
            await gate.wait()
            return "finished"

        gateway.get_status.side_effect = delayed_status
        detail_calls = gateway.get.await_count

        tick = asyncio.create_task(controller.poll_once())
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        await controller.stop()
        gate.set()
        await tick

        view = controller.view
        assert view.status == TaskStatus.IDLE
        assert view.output is None
        assert view.progress == 15.0
        assert gateway.get.await_count == detail_calls

    @pytest.mark.asyncio
    async def test_poll_loop_runs_on_interval(self, gateway: AsyncMock) -> None:
        ctrl = TaskController(gateway, poll_interval=0.01)
        try:
            await ctrl.start_task("find empty accounts")
            gateway.get_status.return_value = "finished"
            gateway.get.return_value = _detail(STEPS, output="done", status="finished")
            for _ in range(200):
                if ctrl.status == TaskStatus.COMPLETED:
                    break
                await asyncio.sleep(0.01)
            assert ctrl.status == TaskStatus.COMPLETED
            assert not ctrl.is_polling
        finally:
            await ctrl.close()


class TestDisconnect:
    @pytest.mark.asyncio
    async def test_disconnect_keeps_running_and_polling(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        await controller.start_task("find empty accounts")
        view = await controller.report_disconnect(DisconnectSignal(source="live-view"))
        assert view.status == TaskStatus.RUNNING
        assert view.error == DisconnectSignal.DEFAULT_MESSAGE
        assert view.live_url is None
        assert controller.is_polling

        gateway.get_status.return_value = "finished"
        gateway.get.return_value = _detail(
            STEPS, output="done", live_url="https://live/t1", status="finished"
        )
        await controller.poll_once()
        view = controller.view
        assert view.status == TaskStatus.COMPLETED
        assert view.live_url is None


class TestConcurrentCommands:
    @pytest.mark.asyncio
    async def test_reset_during_create_discards_created_task(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        """A create that returns after reset() is not adopted and the remote task is stopped."""
        gate = asyncio.Event()

        async def delayed_create(*args) -> CreatedTask:
            await gate.wait()
            return CreatedTask(id="t1", live_url="https://live/t1")

        gateway.create.side_effect = delayed_create
        start = asyncio.create_task(controller.start_task("find empty accounts"))
        await asyncio.sleep(0)
        await controller.reset()
        gate.set()
        view = await start

        assert view.status == TaskStatus.IDLE
        assert view.task_id is None
        assert controller.status == TaskStatus.IDLE
        assert not controller.is_polling
        gateway.get_status.assert_not_awaited()
        gateway.stop.assert_awaited_once_with("t1")

    @pytest.mark.asyncio
    async def test_second_start_while_creating_is_rejected(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        gate = asyncio.Event()

        async def delayed_create(*args) -> CreatedTask:
            await gate.wait()
            return CreatedTask(id="t1")

        gateway.create.side_effect = delayed_create
        first = asyncio.create_task(controller.start_task("first"))
        await asyncio.sleep(0)
        with pytest.raises(IllegalTransition):
            await controller.start_task("second")
        gate.set()
        view = await first

        assert gateway.create.await_count == 1
        assert view.task_id == "t1"

    @pytest.mark.asyncio
    async def test_concurrent_starts_create_one_task(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        results = await asyncio.gather(
            controller.start_task("a"), controller.start_task("b"), return_exceptions=True
        )
        assert gateway.create.await_count == 1
        assert sum(isinstance(r, IllegalTransition) for r in results) == 1

    @pytest.mark.asyncio
    async def test_stop_does_not_overwrite_completion(
        self, controller: TaskController, gateway: AsyncMock
    ) -> None:
        """A tick that completes the task while stop() is in flight wins."""
        await controller.start_task("find empty accounts")
        gate = asyncio.Event()

        async def delayed_stop(task_id: str) -> None:
            await gate.wait()

        gateway.stop.side_effect = delayed_stop
        gateway.get_status.return_value = "finished"
        gateway.get.return_value = _detail(STEPS, output="done", status="finished")

        stopping = asyncio.create_task(controller.stop())
        await asyncio.sleep(0)
        await controller.poll_once()
        gate.set()
        view = await stopping

        assert view.status == TaskStatus.COMPLETED
        assert view.task_id == "t1"
        assert view.output == "done"


class TestPollLoopResilience:
    @pytest.mark.asyncio
    async def test_unexpected_error_does_not_end_loop(self, gateway: AsyncMock) -> None:
        ctrl = TaskController(gateway, poll_interval=0.01)
        try:
            await ctrl.start_task("find empty accounts")
            gateway.get_status.side_effect = RuntimeError("unexpected payload")
            for _ in range(100):
                if gateway.get_status.await_count >= 3:
                    break
                await asyncio.sleep(0.01)
            assert gateway.get_status.await_count >= 3
            assert ctrl.is_polling
            assert ctrl.status == TaskStatus.RUNNING

            gateway.get_status.side_effect = None
            gateway.get_status.return_value = "finished"
            for _ in range(100):
                if ctrl.status == TaskStatus.COMPLETED:
                    break
                await asyncio.sleep(0.01)
            assert ctrl.status == TaskStatus.COMPLETED
        finally:
            await ctrl.close()
