"""Agent loop: prompt, plan, execute, repeat."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx

from portagent.config import AgentConfig
from portagent.executor import execute_plan
from portagent.prompt_engine import build_prompt
from portagent.report import write_fatal_report, write_report
from portagent.state import SessionState, analyze_source_folder, create_session
from portagent.subagents.planner import request_plan

logger = logging.getLogger(__name__)

COMPLETION_SUMMARY = "Completed agent loop. Check output_psp for results."


async def run_agent(
    source_folder: str | Path,
    api_key: str,
    config: AgentConfig | None = None,
) -> SessionState:
    """Run the agent loop and write the final report.

    Args:
        source_folder: Folder holding the game to port
        api_key: Bearer token for the model API
        config: Run settings (defaults to AgentConfig())

    Returns:
        The session state after the last iteration

    Raises:
        SetupError: If the source folder is unusable
        PlanRequestError: If the model API call fails
    """
    config = config or AgentConfig()
    state = create_session(source_folder, base_dir=config.base_dir, report_path=config.report_path)
    analysis = analyze_source_folder(state)

    iteration = 0
    async with httpx.AsyncClient(timeout=None) as client:
        while iteration < config.max_iterations:
            iteration += 1
            logger.info(f"Iteration {iteration}/{config.max_iterations}")

            prompt = build_prompt(state, analysis, iteration)
            plan = await request_plan(
                api_key,
                prompt,
                client=client,
                model=config.model,
                endpoint=config.endpoint,
                temperature=config.temperature,
            )
            if await execute_plan(state, plan, iteration):
                logger.info(f"Plan signalled completion at iteration {iteration}")
                break
        else:
            logger.info(f"Reached iteration ceiling ({config.max_iterations})")

    summary = (
        f"{COMPLETION_SUMMARY} "
        f"Iterations: {iteration}, actions executed: {len(state.actions)}, errors: {len(state.errors)}."
    )
    write_report(state, summary)
    return state


def run(
    source_folder: str | Path,
    api_key: str,
    config: AgentConfig | None = None,
) -> int:
    """Run the agent to completion and return a process exit status.

    Any exception is fatal: a fallback report is written and 1 is returned.
    """
    config = config or AgentConfig()
    try:
        asyncio.run(run_agent(source_folder, api_key, config))
    except Exception as e:
        logger.error(f"Agent run failed: {e}")
        report_path = config.fatal_report_path
        try:
            write_fatal_report(report_path, e)
        except OSError as write_error:
            logger.error(f"Could not write fatal report to {report_path}: {write_error}")
        return 1
    return 0
