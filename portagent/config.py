"""Run-time settings and their defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# Iteration ceiling
MAX_ITERATIONS = 20

# Remote model
API_ENDPOINT = "https://api.perplexity.ai/chat/completions"
DEFAULT_MODEL = "sonar-pro"
DEFAULT_TEMPERATURE = 0.2

# Serialized file list is cut to this many characters in the prompt
MAX_FILE_LIST_CHARS = 4000

# Working layout, relative to the base directory
WORK_DIR_NAME = "work"
LOGS_DIR_NAME = "logs"
OUTPUT_DIR_NAME = "output_psp"

DEFAULT_REPORT_PATH = Path.home() / "Desktop" / "ps2-to-psp-agent-report.txt"


@dataclass
class AgentConfig:
    """Settings for one agent run."""

    max_iterations: int = MAX_ITERATIONS
    model: str = DEFAULT_MODEL
    endpoint: str = API_ENDPOINT
    temperature: float = DEFAULT_TEMPERATURE
    base_dir: Path = field(default_factory=Path.cwd)
    report_path: Path = DEFAULT_REPORT_PATH
    fatal_report_path: Path = DEFAULT_REPORT_PATH
