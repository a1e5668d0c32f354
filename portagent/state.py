"""Session state and the one-time analysis of the source folder."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from portagent.config import (
    DEFAULT_REPORT_PATH,
    LOGS_DIR_NAME,
    OUTPUT_DIR_NAME,
    WORK_DIR_NAME,
)
from portagent.schemas import ActionRecord, ErrorRecord

logger = logging.getLogger(__name__)


class SetupError(Exception):
    """Raised when the session cannot be initialized."""

    pass


@dataclass
class SessionState:
    """Mutable context threaded through the agent loop."""

    source_folder: Path
    work_dir: Path
    logs_dir: Path
    output_dir: Path
    report_path: Path = DEFAULT_REPORT_PATH
    actions: list[ActionRecord] = field(default_factory=list)
    errors: list[ErrorRecord] = field(default_factory=list)


@dataclass(frozen=True)
class AnalysisSnapshot:
    """File names found in the source folder at startup."""

    files: tuple[str, ...] = ()


def create_session(
    source_folder: str | Path,
    base_dir: str | Path | None = None,
    report_path: Path = DEFAULT_REPORT_PATH,
) -> SessionState:
    """Resolve paths and create the working directories.

    Args:
        source_folder: Folder holding the game to port
        base_dir: Where work/, logs/ and output_psp/ live (defaults to cwd)
        report_path: Where the final report is written

    Returns:
        A fresh SessionState

    Raises:
        SetupError: If the source folder is missing or not a directory
    """
    source = Path(source_folder).expanduser().resolve()
    if not source.exists():
        raise SetupError(f"Source folder does not exist: {source}")
    if not source.is_dir():
        raise SetupError(f"Source folder is not a directory: {source}")

    base = Path(base_dir).resolve() if base_dir else Path.cwd()
    state = SessionState(
        source_folder=source,
        work_dir=base / WORK_DIR_NAME,
        logs_dir=base / LOGS_DIR_NAME,
        output_dir=base / OUTPUT_DIR_NAME,
        report_path=Path(report_path),
    )

    for directory in (state.work_dir, state.logs_dir, state.output_dir):
        directory.mkdir(parents=True, exist_ok=True)

    logger.info(f"Session ready: source={state.source_folder} base={base}")
    return state


def utf8_safe(text: str | Path) -> str:
    """Replace undecodable filesystem bytes so the text encodes as UTF-8."""
    return str(text).encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def analyze_source_folder(state: SessionState) -> AnalysisSnapshot:
    """List the source folder's entries, sorted by name."""
    files = tuple(sorted(utf8_safe(entry.name) for entry in state.source_folder.iterdir()))
    logger.info(f"Detected {len(files)} entries in {state.source_folder}")
    return AnalysisSnapshot(files=files)
