"""Pytest configuration and fixtures for portagent tests."""

import json

import pytest
from pathlib import Path

from portagent.config import AgentConfig
from portagent.state import SessionState, create_session


@pytest.fixture
def tmp_workspace(tmp_path: Path) -> Path:
    """Create a temporary base directory for work/, logs/ and output_psp/."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return workspace


@pytest.fixture
def ps2_folder(tmp_path: Path) -> Path:
    """Create a sample PS2 game folder."""
    folder = tmp_path / "ps2game"
    folder.mkdir()
    (folder / "game.iso").write_bytes(b"\x00" * 16)
    (folder / "icon.png").write_bytes(b"\x89PNG")
    return folder


@pytest.fixture
def session(ps2_folder: Path, tmp_workspace: Path, tmp_path: Path) -> SessionState:
    """Create a session with its directories under tmp_workspace."""
    return create_session(ps2_folder, base_dir=tmp_workspace, report_path=tmp_path / "report.txt")


@pytest.fixture
def agent_config(tmp_workspace: Path, tmp_path: Path) -> AgentConfig:
    """Agent settings that keep every report inside tmp_path."""
    return AgentConfig(
        base_dir=tmp_workspace,
        report_path=tmp_path / "report.txt",
        fatal_report_path=tmp_path / "fatal.txt",
    )


@pytest.fixture
def completion_body():
    """Build a chat-completion response body whose first choice carries content."""
    def _body(content: str | None) -> dict:
        return {
            "id": "cmpl-test",
            "model": "sonar-pro",
            "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        }

    return _body


@pytest.fixture
def plan_json():
    """Serialize a plan dict the way the model would answer."""
    def _dump(actions: list[dict], done: bool = False) -> str:
        return json.dumps({"actions": actions, "done": done})

    return _dump
