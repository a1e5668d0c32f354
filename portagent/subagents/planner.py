"""Planner subagent: asks the remote chat-completion API for the next plan."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx

from portagent.config import API_ENDPOINT, DEFAULT_MODEL, DEFAULT_TEMPERATURE
from portagent.schemas import Action, ActionType, Plan

logger = logging.getLogger(__name__)

PARSE_FAILURE_DESCRIPTION = "Failed to parse JSON from model."

# ```json ... ``` wrapper some models put around the answer
CODE_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*\n(.*?)\n?```\s*$", re.DOTALL | re.IGNORECASE)


class PlanRequestError(Exception):
    """Raised when the remote model cannot be reached or answers badly."""

    pass


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any."""
    match = CODE_FENCE_RE.match(text)
    if match:
        return match.group(1)
    return text


def _extract_content(body: Any) -> str:
    """Pull choices[0].message.content out of a completion response."""
    try:
        message = body["choices"][0]["message"]
    except (KeyError, IndexError, TypeError) as e:
        raise PlanRequestError("Completion response has no choices[0].message") from e

    if not isinstance(message, dict):
        raise PlanRequestError("Completion response message is not an object")

    content = message.get("content")
    if not content:
        return "{}"
    return str(content)


def parse_plan(content: str) -> Plan:
    """Parse model text into a Plan, never raising on bad JSON.

    Invalid JSON becomes a plan with a single plan_note carrying the raw text
    and ``done=False`` so the loop keeps going.
    """
    try:
        payload = json.loads(_strip_code_fence(content))
    except json.JSONDecodeError:
        logger.warning("Model response is not valid JSON, substituting a parse-failure note")
        return Plan(
            actions=[
                Action(
                    type=ActionType.PLAN_NOTE.value,
                    description=PARSE_FAILURE_DESCRIPTION,
                    content_or_command=content,
                )
            ],
            done=False,
        )
    return Plan.from_payload(payload)


async def _post_completion(
    client: httpx.AsyncClient,
    api_key: str,
    prompt: str,
    model: str,
    endpoint: str,
    temperature: float,
) -> Any:
    """POST the chat-completion request and return the decoded body."""
    try:
        response = await client.post(
            endpoint,
            json={
                "model": model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": temperature,
            },
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )
        response.raise_for_status()

    except httpx.HTTPStatusError as e:
        logger.error(f"Model API HTTP error: {e}")
        raise PlanRequestError(f"Model API returned error: {e.response.status_code}") from e

    except httpx.RequestError as e:
        logger.error(f"Failed to reach model API: {e}")
        raise PlanRequestError(f"Model API unavailable: {e}") from e

    try:
        return response.json()
    except json.JSONDecodeError as e:
        raise PlanRequestError("Model API returned a non-JSON body") from e


async def request_plan(
    api_key: str,
    prompt: str,
    *,
    client: httpx.AsyncClient | None = None,
    model: str = DEFAULT_MODEL,
    endpoint: str = API_ENDPOINT,
    temperature: float = DEFAULT_TEMPERATURE,
) -> Plan:
    """Request the next plan from the remote model.

    Args:
        api_key: Bearer token for the API
        prompt: Prompt text for this iteration
        client: Shared client; a temporary one is created when omitted
        model: Model identifier
        endpoint: Chat-completion URL
        temperature: Sampling temperature

    Returns:
        The parsed Plan, or the parse-failure Plan for non-JSON answers

    Raises:
        PlanRequestError: On transport, HTTP status or response-shape errors
    """
    if client is None:
        async with httpx.AsyncClient(timeout=None) as own_client:
            body = await _post_completion(own_client, api_key, prompt, model, endpoint, temperature)
    else:
        body = await _post_completion(client, api_key, prompt, model, endpoint, temperature)

    return parse_plan(_extract_content(body))
