"""Action executor: applies one plan to the session."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from portagent.schemas import Action, ActionRecord, ActionType, ErrorRecord, Plan
from portagent.state import SessionState
from portagent.subagents.command_runner import run_command

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT_NAME = "script_generated.txt"
NOTES_LOG_NAME = "plan_notes.log"


def _timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _script_path(state: SessionState, relative: str | None) -> Path:
    """Resolve an action path under the work directory."""
    relative = (relative or "").lstrip("/\\") or DEFAULT_SCRIPT_NAME
    return state.work_dir / relative


def _generate_script(state: SessionState, action: Action) -> None:
    out_path = _script_path(state, action.path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(action.content_or_command or "", encoding="utf-8")
    logger.info(f"Wrote {out_path}")


def _append_note(state: SessionState, action: Action) -> None:
    notes_path = state.logs_dir / NOTES_LOG_NAME
    notes_path.parent.mkdir(parents=True, exist_ok=True)
    with open(notes_path, "a", encoding="utf-8") as f:
        f.write(f"\n{_timestamp()} - {action.description}")


async def _execute_action(state: SessionState, action: Action) -> None:
    kind = action.kind
    if kind == ActionType.GENERATE_SCRIPT:
        _generate_script(state, action)
    elif kind == ActionType.RUN_COMMAND:
        await run_command(action.content_or_command, state.logs_dir, cwd=state.work_dir.parent)
    elif kind == ActionType.PLAN_NOTE:
        _append_note(state, action)


async def execute_plan(state: SessionState, plan: Plan, iteration: int = 0) -> bool:
    """Execute a plan's actions in order.

    A plan without an action list counts as finished. Failures are recorded
    per action in ``state.errors`` and never stop the remaining actions.

    Args:
        state: Session state receiving action and error records
        plan: Plan for this iteration
        iteration: Iteration index stored on each action record

    Returns:
        True when the loop should stop
    """
    if plan.actions is None:
        logger.info("Plan has no action list, treating it as done")
        return True

    for action in plan.actions:
        if action.kind is None:
            logger.debug(f"Ignoring action of unknown type {action.type!r}")
            continue

        state.actions.append(ActionRecord(iteration=iteration, action=action))
        try:
            await _execute_action(state, action)
        except Exception as e:
            logger.warning(f"Action {action.type} failed: {e}")
            state.errors.append(ErrorRecord(action=action, error=str(e)))

    return plan.done
