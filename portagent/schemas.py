"""Pydantic schemas for the plans exchanged with the remote model."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class ActionType(str, Enum):
    """Action kinds the executor knows how to perform."""

    GENERATE_SCRIPT = "generate_script"
    RUN_COMMAND = "run_command"
    PLAN_NOTE = "plan_note"


class Action(BaseModel):
    """A single operation requested by the model.

    ``type`` is kept as a plain string so that unknown kinds survive
    validation and can be skipped by the executor.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    type: str
    description: str = ""
    path: str | None = None
    language_or_shell: str | None = None
    content_or_command: str | None = None

    @property
    def kind(self) -> ActionType | None:
        """Known action kind, or None for anything else."""
        try:
            return ActionType(self.type)
        except ValueError:
            return None


class Plan(BaseModel):
    """One iteration's batch of actions plus the termination flag.

    ``actions`` is None when the model's answer had no usable action list.
    """

    actions: list[Action] | None = None
    done: bool = False

    @classmethod
    def from_payload(cls, payload: Any) -> Plan:
        """Build a plan from decoded JSON of unknown shape."""
        if not isinstance(payload, dict):
            return cls(actions=None, done=False)

        done = bool(payload.get("done"))
        raw_actions = payload.get("actions")
        if not isinstance(raw_actions, list):
            return cls(actions=None, done=done)

        actions = []
        for i, item in enumerate(raw_actions):
            try:
                actions.append(Action.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Dropping malformed action #{i}: {e.error_count()} validation error(s)")

        return cls(actions=actions, done=done)


# --- Session records ---


class ActionRecord(BaseModel):
    """An action the executor attempted, in execution order."""

    iteration: int = Field(..., ge=0)
    action: Action


class ErrorRecord(BaseModel):
    """An action whose side effect failed, with the error message."""

    model_config = ConfigDict(frozen=True)

    action: Action
    error: str
