"""ActionPlanner: asks an OpenAI chat model for the next browser action as a JSON object."""

import json
import logging
from typing import Any

import openai
from openai import AsyncOpenAI

from bonkagent.automation.models import PlannedAction, RunStep
from bonkagent.errors import TransportError, UpstreamDomainError, ValidationError

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = """You drive a web browser to complete a Solana/BONK task for the user.
You see the current page (url, title, visible text) and the steps taken so far.
Reply with a JSON object describing exactly one next action:
{"action": "goto" | "click" | "fill" | "extract" | "done",
 "url": "<for goto>", "selector": "<CSS or text= selector for click/fill>",
 "value": "<text for fill>", "reason": "<short explanation>",
 "output": <findings for extract/done, any JSON value>}
Use "extract" to record findings and keep going, "done" when the task is complete.
Never connect a wallet, sign transactions or enter private keys."""

# Only the tail of the history is sent back to the model.
HISTORY_LIMIT = 10


class ActionPlanner:
    """Chooses actions via chat completions in JSON mode."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4o",
        client: Any = None,
    ) -> None:
        self._model = model
        self._client = client or (AsyncOpenAI(api_key=api_key) if api_key else None)

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def next_action(
        self,
        task: str,
        page_state: dict[str, Any],
        history: list[RunStep],
        model: str | None = None,
    ) -> PlannedAction:
        if self._client is None:
            raise ValidationError("OpenAI API key is not configured")
        prompt = {
            "task": task,
            "page": page_state,
            "history": [
                {"action": s.action, "details": s.details, "url": s.url, "ok": s.ok}
                for s in history[-HISTORY_LIMIT:]
            ],
        }
        try:
            resp = await self._client.chat.completions.create(
                model=model or self._model,
                messages=[
                    {"role": "system", "content": _SYSTEM_PROMPT},
                    {"role": "user", "content": json.dumps(prompt)},
                ],
                response_format={"type": "json_object"},
            )
        except openai.APIConnectionError as e:
            raise TransportError("OpenAI API is unreachable", details=str(e)) from e
        except openai.APIError as e:
            raise UpstreamDomainError(
                "OpenAI API request failed",
                status_code=getattr(e, "status_code", None),
                details=str(e),
            ) from e

        content = resp.choices[0].message.content
        try:
            action = PlannedAction.model_validate(json.loads(content or ""))
        except ValueError as e:
            raise UpstreamDomainError("Planner returned an unusable action", details=content) from e
        logger.debug("Planned %s: %s", action.action, action.reason)
        return action
