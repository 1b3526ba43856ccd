"""Shared httpx request helper: maps transport and status failures onto the error taxonomy."""

import logging
from typing import Any

import httpx

from bonkagent.errors import TransportError, UpstreamDomainError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


async def request_json(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    json: Any = None,
    timeout: float = DEFAULT_TIMEOUT,
    service: str = "upstream",
) -> Any:
    """Send one request and return the decoded JSON body (text if not JSON, None if empty).

    Raises TransportError when the service cannot be reached and
    UpstreamDomainError when it answers with a non-2xx status.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.request(
                method, url, headers=headers, params=params, json=json
            )
    except httpx.TimeoutException as e:
        raise TransportError(f"{service} request timed out", details=str(e)) from e
    except httpx.RequestError as e:
        raise TransportError(f"{service} is unreachable", details=str(e)) from e

    if response.status_code >= 400:
        details = _response_body(response)
        logger.debug(
            "%s %s -> HTTP %d: %s", method, url, response.status_code, details
        )
        raise UpstreamDomainError(
            f"{service} returned HTTP {response.status_code}",
            status_code=response.status_code,
            details=details,
        )
    if not response.content:
        return None
    return _response_body(response)
