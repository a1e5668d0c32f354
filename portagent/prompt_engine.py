"""Prompt generation for each agent iteration."""

from __future__ import annotations

import json

from portagent.config import MAX_FILE_LIST_CHARS
from portagent.schemas import ActionType
from portagent.state import AnalysisSnapshot, SessionState, utf8_safe

RESPONSE_FORMAT = """{
  "actions": [
    {
      "type": "generate_script" | "run_command" | "plan_note",
      "description": "short text",
      "path": "relative/path/if_applicable",
      "language_or_shell": "python" | "bash" | "cpp" | null,
      "content_or_command": "script body or shell command"
    }
  ],
  "done": false
}"""

ACTION_DESCRIPTIONS = {
    ActionType.GENERATE_SCRIPT: "create a script file (C/C++/Python/etc.) in workDir.",
    ActionType.RUN_COMMAND: "run a shell command (e.g., external converters, compilers).",
    ActionType.PLAN_NOTE: "add notes for next iterations.",
}


def _serialize_files(files: tuple[str, ...], max_chars: int = MAX_FILE_LIST_CHARS) -> str:
    """Compact JSON list of file names, cut to max_chars."""
    return json.dumps(list(files), separators=(",", ":"), ensure_ascii=False)[:max_chars]


def build_prompt(state: SessionState, analysis: AnalysisSnapshot, iteration: int) -> str:
    """Build the prompt for one iteration.

    Args:
        state: Current session state (only paths are read)
        analysis: Snapshot of the source folder
        iteration: 1-based iteration index

    Returns:
        Prompt text describing the task, the context and the JSON contract
    """
    parts = [
        "You are an autonomous game porting agent.",
        "Target: Take a PS2 game folder and iteratively create a PSP-compatible game folder.",
        "",
        "Constraints:",
        "- You can only respond with JSON specifying actions.",
        "- Do not output explanations.",
        "",
        f"Iteration: {iteration}",
        "",
        f"PS2 folder: {utf8_safe(state.source_folder)}",
        f"Work dir: {utf8_safe(state.work_dir)}",
        f"Target dir: {utf8_safe(state.output_dir)}",
        "",
        f"Detected files: {_serialize_files(analysis.files)}",
        "",
        "Allowed actions:",
    ]
    for action_type, text in ACTION_DESCRIPTIONS.items():
        parts.append(f'- "{action_type.value}": {text}')

    parts.append("")
    parts.append("Respond JSON:")
    parts.append(RESPONSE_FORMAT)

    return "\n".join(parts)
