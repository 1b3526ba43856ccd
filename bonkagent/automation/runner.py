"""Runs a task in a fresh Browserbase session, driving its browser over CDP with Playwright.

The session is always released when the run ends, successful or not.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncContextManager, AsyncIterator, Callable

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from bonkagent.automation.models import PlannedAction, RunStep, TaskRunResult
from bonkagent.automation.planner import ActionPlanner
from bonkagent.errors import DashboardError, TransportError, UpstreamDomainError, ValidationError
from bonkagent.sessions.browserbase import BrowserbaseSessions

logger = logging.getLogger(__name__)

Connector = Callable[[str], AsyncContextManager[Page]]

# Keyword -> first page, checked in order against the lowercased task.
START_PAGES: list[tuple[tuple[str, ...], str]] = [
    (("clean", "empty account"), "https://solscan.io"),
    (("burn", "bonk"), "https://bonkbutton.com"),
    (("launch", "token"), "https://letsbonk.fun"),
    (("analyze", "wallet"), "https://solscan.io"),
]


def pick_start_url(task: str) -> str | None:
    """First page for a task, or None to let the planner choose."""
    text = task.lower()
    for keywords, url in START_PAGES:
        if any(k in text for k in keywords):
            return url
    return None


@asynccontextmanager
async def connect_over_cdp(connect_url: str) -> AsyncIterator[Page]:
    """Attach to a remote browser and yield its first page."""
    async with async_playwright() as pw:
        try:
            browser = await pw.chromium.connect_over_cdp(connect_url)
        except PlaywrightError as e:
            raise TransportError("Could not connect to the browser session", details=str(e)) from e
        try:
            context = browser.contexts[0] if browser.contexts else await browser.new_context()
            page = context.pages[0] if context.pages else await context.new_page()
            yield page
        finally:
            await browser.close()


class BrowserbaseTaskRunner:
    """Plan-act loop over a Browserbase browser."""

    def __init__(
        self,
        sessions: BrowserbaseSessions,
        planner: ActionPlanner,
        connect: Connector = connect_over_cdp,
        max_steps: int = 15,
        page_text_limit: int = 4000,
        action_timeout_ms: int = 30000,
    ) -> None:
        self._sessions = sessions
        self._planner = planner
        self._connect = connect
        self._max_steps = max_steps
        self._page_text_limit = page_text_limit
        self._action_timeout_ms = action_timeout_ms

    async def run(
        self, task: str, start_url: str | None = None, model: str | None = None
    ) -> TaskRunResult:
        if not task or not task.strip():
            raise ValidationError("Task description is required")
        if not self._planner.is_configured:
            raise ValidationError("OpenAI API key is not configured")

        session = await self._sessions.create({"task": task[:200]})
        result = TaskRunResult(session_id=session.id)
        try:
            result.live_url = await self._live_url(session.id)
            if not session.connect_url:
                raise UpstreamDomainError("Browserbase returned no connect URL", details=session.id)
            async with self._connect(session.connect_url) as page:
                await self._drive(page, task, start_url or pick_start_url(task), model, result)
        finally:
            await self._release(session.id)
        logger.info(
            "Browserbase run in session %s finished: %d steps, completed=%s",
            session.id,
            len(result.steps),
            result.completed,
        )
        return result

    async def _drive(
        self,
        page: Page,
        task: str,
        start_url: str | None,
        model: str | None,
        result: TaskRunResult,
    ) -> None:
        if start_url:
            await self._act(page, PlannedAction(action="goto", url=start_url), result.steps)
        for _ in range(self._max_steps):
            state = await self._page_state(page)
            action = await self._planner.next_action(task, state, result.steps, model)
            if action.action in ("extract", "done"):
                if action.output is not None or result.output is None:
                    result.output = action.output if action.output is not None else action.reason
                result.steps.append(
                    RunStep(action=action.action, details=action.reason, url=state["url"])
                )
                if action.action == "done":
                    result.completed = True
                    return
                continue
            await self._act(page, action, result.steps)
        logger.warning("Browserbase run stopped after %d planned steps", self._max_steps)

    async def _act(self, page: Page, action: PlannedAction, steps: list[RunStep]) -> None:
        """Perform one browser action. Browser errors are recorded as a failed step."""
        target = action.url if action.action == "goto" else action.selector
        if not target:
            details = f"Skipped: no target for {action.action}"
            steps.append(RunStep(action=action.action, details=details, ok=False))
            return
        try:
            if action.action == "goto":
                await page.goto(target, timeout=self._action_timeout_ms)
            elif action.action == "click":
                await page.click(target, timeout=self._action_timeout_ms)
            else:
                await page.fill(target, action.value or "", timeout=self._action_timeout_ms)
        except PlaywrightError as e:
            logger.warning("Browser action %s failed: %s", action.action, e)
            steps.append(
                RunStep(action=action.action, details=f"{target}: {e}", url=page.url, ok=False)
            )
            return
        steps.append(RunStep(action=action.action, details=action.reason or target, url=page.url))

    async def _page_state(self, page: Page) -> dict[str, Any]:
        try:
            title = await page.title()
            text = await page.inner_text("body")
        except PlaywrightError as e:
            logger.debug("Page state unavailable: %s", e)
            title, text = "", ""
        return {"url": page.url, "title": title, "text": text[: self._page_text_limit]}

    async def _live_url(self, session_id: str) -> str | None:
        try:
            return (await self._sessions.debug(session_id)).live_url
        except DashboardError as e:
            logger.warning("No live view for session %s: %s", session_id, e)
            return None

    async def _release(self, session_id: str) -> None:
        try:
            await self._sessions.release(session_id)
        except DashboardError as e:
            logger.warning("Could not release session %s: %s", session_id, e)
