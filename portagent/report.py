"""Plain-text run reports."""

from __future__ import annotations

import json
import logging
import traceback
from pathlib import Path

from portagent.state import SessionState

logger = logging.getLogger(__name__)


def render_report(state: SessionState, summary: str) -> str:
    """Summary line followed by the pretty-printed error records."""
    errors = [record.model_dump(exclude_none=True) for record in state.errors]
    return f"Summary: {summary}\nErrors: {json.dumps(errors, indent=2)}"


def _write(path: Path, text: str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_report(state: SessionState, summary: str) -> Path:
    """Write the final report to the session's report path, overwriting it."""
    path = _write(state.report_path, render_report(state, summary))
    logger.info(f"Report written to {path} ({len(state.errors)} error(s))")
    return path


def write_fatal_report(path: Path, exc: BaseException) -> Path:
    """Write a fatal-error report with the exception's traceback."""
    details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return _write(path, f"Fatal error:\n{details}")
