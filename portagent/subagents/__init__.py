"""Subagents wrapping the agent's external collaborators."""

from portagent.subagents.command_runner import run_command
from portagent.subagents.planner import request_plan

__all__ = ["run_command", "request_plan"]
