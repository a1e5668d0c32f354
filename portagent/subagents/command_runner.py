"""Command runner subagent: shell execution with output captured to a log file."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)

LOG_PREFIX = "cmd_"
LOG_SUFFIX = ".log"


def _open_unique_log(logs_dir: Path) -> tuple[Path, IO[bytes]]:
    """Create a new timestamped log file, suffixing on name collision."""
    stamp = int(time.time() * 1000)
    attempt = 0
    while True:
        name = f"{LOG_PREFIX}{stamp}{LOG_SUFFIX}" if attempt == 0 else f"{LOG_PREFIX}{stamp}_{attempt}{LOG_SUFFIX}"
        log_path = logs_dir / name
        try:
            return log_path, open(log_path, "xb")
        except FileExistsError:
            attempt += 1


async def run_command(
    command: str | None,
    logs_dir: Path | str,
    cwd: Path | str | None = None,
) -> Path:
    """Run a shell command, streaming stdout and stderr into one log file.

    The exit status is not inspected. There is no timeout.

    Args:
        command: The shell command to execute
        logs_dir: Directory receiving the cmd_<ms>.log file
        cwd: Working directory for the child (defaults to current directory)

    Returns:
        Path of the log file holding the command's combined output

    Raises:
        ValueError: If the command is empty
        OSError: If the log file cannot be created or the shell cannot start
    """
    if not command:
        raise ValueError("run_command action has no command")

    logs_dir = Path(logs_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    log_path, log_file = _open_unique_log(logs_dir)
    with log_file:
        logger.info(f"Executing command: {command} (log: {log_path.name})")
        process = await asyncio.create_subprocess_shell(
            command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=log_file,
            stderr=log_file,
            cwd=str(cwd) if cwd else None,
        )
        await process.wait()

    return log_path
