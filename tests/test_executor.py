"""Tests for the action executor."""

import asyncio
import re

import pytest
from unittest.mock import AsyncMock, patch

from portagent.executor import NOTES_LOG_NAME, execute_plan
from portagent.schemas import Action, Plan


def _execute(state, plan, iteration=1):
    return asyncio.run(execute_plan(state, plan, iteration))


def _plan(*actions: dict, done: bool = False) -> Plan:
    return Plan(actions=[Action(**a) for a in actions], done=done)


class TestPlanValidation:
    """Test handling of plans without an action list."""

    def test_no_actions_means_done(self, session):
        """actions=None returns done without recording anything."""
        assert _execute(session, Plan(actions=None, done=False)) is True
        assert session.errors == []
        assert session.actions == []

    @pytest.mark.parametrize("payload", [{}, {"actions": None}, {"actions": {"type": "plan_note"}}, "x"])
    def test_malformed_payloads_mean_done(self, session, payload):
        """Payloads with a missing or malformed actions field end the loop."""
        assert _execute(session, Plan.from_payload(payload)) is True
        assert session.errors == []

    def test_empty_action_list_uses_done_flag(self, session):
        """An empty list is valid and the done flag decides."""
        assert _execute(session, Plan(actions=[], done=False)) is False
        assert _execute(session, Plan(actions=[], done=True)) is True


class TestGenerateScript:
    """Test generate_script actions."""

    def test_writes_file_under_work_dir(self, session):
        """Content is written to the given relative path."""
        _execute(session, _plan({
            "type": "generate_script",
            "path": "tools/convert.py",
            "content_or_command": "print('convert')",
        }))
        assert (session.work_dir / "tools" / "convert.py").read_text() == "print('convert')"

    def test_default_path_and_content(self, session):
        """Missing path and content fall back to defaults."""
        _execute(session, _plan({"type": "generate_script"}))
        assert (session.work_dir / "script_generated.txt").read_text() == ""

    def test_overwrite_not_append(self, session):
        """Writing the same path twice keeps only the last content."""
        action = {"type": "generate_script", "path": "build.sh", "content_or_command": "echo build"}
        _execute(session, _plan(action))
        _execute(session, _plan(action))
        assert (session.work_dir / "build.sh").read_text() == "echo build"

        _execute(session, _plan({**action, "content_or_command": "echo rebuilt"}))
        assert (session.work_dir / "build.sh").read_text() == "echo rebuilt"

    def test_absolute_path_lands_in_work_dir(self, session):
        """Leading separators do not escape the work directory."""
        _execute(session, _plan({"type": "generate_script", "path": "/abs.txt", "content_or_command": "x"}))
        assert (session.work_dir / "abs.txt").read_text() == "x"

    def test_write_failure_recorded(self, session):
        """An I/O failure becomes an error record."""
        (session.work_dir / "blocker").write_text("file, not dir")
        action = {"type": "generate_script", "path": "blocker/inner.txt", "content_or_command": "x"}

        done = _execute(session, _plan(action, done=True))

        assert done is True
        assert len(session.errors) == 1
        assert session.errors[0].action.path == "blocker/inner.txt"
        assert session.errors[0].error


class TestRunCommand:
    """Test run_command actions."""

    def test_delegates_to_runner(self, session):
        """The command and log directory are passed to the runner."""
        with patch("portagent.executor.run_command", new_callable=AsyncMock) as mock_run:
            _execute(session, _plan({"type": "run_command", "content_or_command": "make psp"}))

        mock_run.assert_awaited_once()
        args, kwargs = mock_run.call_args
        assert args == ("make psp", session.logs_dir)
        assert kwargs["cwd"] == session.work_dir.parent

    def test_nonzero_exit_keeps_done_flag(self, session):
        """A failing command does not change the plan's done decision."""
        done = _execute(session, _plan({"type": "run_command", "content_or_command": "exit 7"}, done=True))

        assert done is True
        assert session.errors == []
        assert len(list(session.logs_dir.glob("cmd_*.log"))) == 1

    def test_missing_command_recorded(self, session):
        """A run_command without a command is an action error."""
        _execute(session, _plan({"type": "run_command", "description": "nothing to run"}))
        assert len(session.errors) == 1
        assert "no command" in session.errors[0].error

    def test_spawn_failure_recorded(self, session):
        """Spawn errors are recorded, not raised."""
        with patch("portagent.executor.run_command", new=AsyncMock(side_effect=OSError("spawn failed"))):
            done = _execute(session, _plan({"type": "run_command", "content_or_command": "ls"}))

        assert done is False
        assert session.errors[0].error == "spawn failed"


class TestPlanNote:
    """Test plan_note actions."""

    def test_appends_timestamped_line(self, session):
        """Notes are appended with an ISO-8601 timestamp."""
        _execute(session, _plan({"type": "plan_note", "description": "test"}))
        _execute(session, _plan({"type": "plan_note", "description": "second"}))

        lines = (session.logs_dir / NOTES_LOG_NAME).read_text().split("\n")
        assert lines[0] == ""
        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z - test$", lines[1])
        assert lines[2].endswith(" - second")


class TestExecutionOrder:
    """Test sequencing and error isolation."""

    def test_failure_does_not_stop_batch(self, session):
        """Actions after a failing one still run."""
        (session.work_dir / "blocker").write_text("x")
        plan = _plan(
            {"type": "generate_script", "path": "blocker/a.txt", "content_or_command": "a"},
            {"type": "plan_note", "description": "after failure"},
            {"type": "generate_script", "path": "b.txt", "content_or_command": "b"},
            done=False,
        )

        assert _execute(session, plan) is False
        assert len(session.errors) == 1
        assert "after failure" in (session.logs_dir / NOTES_LOG_NAME).read_text()
        assert (session.work_dir / "b.txt").read_text() == "b"

    def test_actions_run_in_order(self, session):
        """A script written earlier in the plan is visible to a later command."""
        plan = _plan(
            {"type": "generate_script", "path": "hello.sh", "content_or_command": "echo from-script"},
            {"type": "run_command", "content_or_command": "sh work/hello.sh"},
        )
        _execute(session, plan)

        [log] = session.logs_dir.glob("cmd_*.log")
        assert log.read_text().strip() == "from-script"

    def test_unknown_type_ignored(self, session):
        """Unknown action types are skipped without errors or records."""
        done = _execute(session, _plan({"type": "format_disk", "content_or_command": "mkfs"}, done=True))

        assert done is True
        assert session.errors == []
        assert session.actions == []

    def test_action_records_appended(self, session):
        """Each dispatched action is recorded with its iteration."""
        _execute(session, _plan({"type": "plan_note", "description": "one"}), iteration=4)

        assert len(session.actions) == 1
        assert session.actions[0].iteration == 4
        assert session.actions[0].action.description == "one"
