"""Tests for CLI commands and display helpers."""

from __future__ import annotations

from datetime import date
from unittest.mock import patch

import pytest

from streakboard.cli import (
    build_parser,
    build_session,
    do_add,
    do_archive,
    do_calendar,
    do_dashboard,
    do_delete,
    do_done,
    do_login,
    do_logout,
    do_rename,
    do_username,
    do_whoami,
    main,
)
from streakboard.config import save_config
from streakboard.display import format_number
from streakboard.errors import NotSignedInError, TaskNotFoundError
from streakboard.windows import Window


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.json"
    save_config({"db_path": str(tmp_path / "test.db")}, path)
    return path


@pytest.fixture
def session(config_path):
    s = build_session(config_path)
    s.today = lambda: date(2024, 1, 10)
    s.start()
    yield s
    s.close()
    s.store.close()


@pytest.fixture
def onboarded(session):
    do_login(session, "alice")
    do_username(session, "Alice")
    return session


# ── Argument Parsing ──────────────────────────────────────────────────────────


class TestArgumentParsing:
    def test_no_args_defaults_to_none_command(self):
        args = build_parser().parse_args([])
        assert args.command is None
        assert args.verbose is False

    def test_login(self):
        args = build_parser().parse_args(["login", "alice"])
        assert args.command == "login"
        assert args.account == "alice"

    def test_add_joins_words(self):
        args = build_parser().parse_args(["add", "Read", "20", "pages"])
        assert args.name == ["Read", "20", "pages"]

    def test_done_takes_int_id(self):
        args = build_parser().parse_args(["done", "1712345678901"])
        assert args.task_id == 1712345678901

    def test_delete_yes_flag(self):
        args = build_parser().parse_args(["delete", "3", "--yes"])
        assert args.yes is True

    def test_verbose(self):
        args = build_parser().parse_args(["-v", "dashboard"])
        assert args.verbose is True
        assert args.command == "dashboard"

    def test_invalid_command_raises(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["nonexistent"])

    def test_non_numeric_id_raises(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["done", "abc"])


# ── format_number ─────────────────────────────────────────────────────────────


class TestFormatNumber:
    def test_small_number(self):
        assert format_number(42) == "42"

    def test_number_with_commas(self):
        assert format_number(1200) == "1,200"

    def test_ten_thousand(self):
        assert format_number(10_000) == "10.0K"

    def test_million(self):
        assert format_number(1_234_567) == "1.2M"

    def test_large_million(self):
        assert format_number(123_456_789) == "123M"


# ── Account commands ──────────────────────────────────────────────────────────


class TestAccountCommands:
    def test_login_new_user_needs_username(self, session):
        result = do_login(session, "alice")
        assert result["ok"] is True
        assert result["username"] is None
        assert session.needs_onboarding is True

    def test_username(self, session):
        do_login(session, "alice")
        assert do_username(session, "Alice") == {"ok": True, "username": "Alice"}

    def test_whoami(self, onboarded):
        result = do_whoami(onboarded)
        assert result["uid"] == onboarded.uid
        assert result["username"] == "Alice"

    def test_whoami_signed_out(self, session):
        assert do_whoami(session) == {"ok": True, "uid": None}

    def test_logout(self, onboarded):
        do_logout(onboarded)
        assert onboarded.signed_in is False

    def test_login_again_keeps_tasks(self, onboarded):
        do_add(onboarded, "Read")
        do_logout(onboarded)
        result = do_login(onboarded, "alice")
        assert result["username"] == "Alice"
        assert [t.name for t in onboarded.tasks] == ["Read"]


# ── Task commands ─────────────────────────────────────────────────────────────


class TestTaskCommands:
    def test_requires_sign_in(self, session):
        with pytest.raises(NotSignedInError):
            do_add(session, "Read")

    def test_requires_username(self, session):
        do_login(session, "alice")
        assert do_add(session, "Read") == {"ok": False, "reason": "no_username"}
        assert session.tasks == ()

    def test_add(self, onboarded):
        result = do_add(onboarded, "Read")
        assert result["ok"] is True
        assert result["task"].name == "Read"

    def test_rename(self, onboarded):
        task = do_add(onboarded, "Read")["task"]
        assert do_rename(onboarded, task.id, "Write")["task"].name == "Write"

    def test_delete_with_yes(self, onboarded):
        task = do_add(onboarded, "Read")["task"]
        assert do_delete(onboarded, task.id, yes=True)["ok"] is True
        assert onboarded.tasks == ()

    @patch("streakboard.cli.Confirm.ask", return_value=False)
    def test_delete_cancelled(self, mock_ask, onboarded):
        task = do_add(onboarded, "Read")["task"]
        assert do_delete(onboarded, task.id) == {"ok": False, "reason": "cancelled"}
        assert len(onboarded.tasks) == 1
        mock_ask.assert_called_once()

    def test_delete_unknown(self, onboarded):
        with pytest.raises(TaskNotFoundError):
            do_delete(onboarded, 1, yes=True)

    def test_archive(self, onboarded):
        task = do_add(onboarded, "Read")["task"]
        assert do_archive(onboarded, task.id)["task"].archived is True
        assert do_archive(onboarded, task.id)["task"].archived is False

    def test_done(self, onboarded):
        task = do_add(onboarded, "Read")["task"]
        result = do_done(onboarded, task.id)
        assert result["status"] == "recorded"
        assert result["task"].streak == 1

    def test_done_twice(self, onboarded):
        task = do_add(onboarded, "Read")["task"]
        do_done(onboarded, task.id)
        assert do_done(onboarded, task.id)["status"] == "duplicate"


# ── Pages ─────────────────────────────────────────────────────────────────────


class TestPages:
    def test_calendar(self, onboarded):
        task = do_add(onboarded, "Read")["task"]
        do_add(onboarded, "Old habit")
        do_archive(onboarded, onboarded.tasks[1].id)
        do_done(onboarded, task.id)
        assert do_calendar(onboarded) == {"ok": True, "active": 1, "archived": 1}

    def test_calendar_archived_name_with_brackets(self, onboarded, capsys):
        task = do_add(onboarded, "chores [/x]")["task"]
        do_archive(onboarded, task.id)
        capsys.readouterr()
        assert do_calendar(onboarded) == {"ok": True, "active": 0, "archived": 1}
        assert "chores [/x]" in capsys.readouterr().out

    def test_calendar_empty(self, onboarded):
        assert do_calendar(onboarded)["active"] == 0

    def test_dashboard(self, onboarded):
        task = do_add(onboarded, "Read")["task"]
        do_done(onboarded, task.id)
        result = do_dashboard(onboarded)
        assert result["leaderboard"][Window.WEEKLY][0]["count"] == 1


# ── main ──────────────────────────────────────────────────────────────────────


class TestMain:
    def test_full_flow(self, config_path):
        with patch("streakboard.cli.build_session", side_effect=lambda: build_session(config_path)):
            main(["login", "alice"])
            main(["username", "Alice"])
            main(["add", "Read", "a", "book"])
            main(["calendar"])
            main(["dashboard"])
            session = build_session(config_path).start()
            try:
                assert session.username == "Alice"
                assert [t.name for t in session.tasks] == ["Read a book"]
            finally:
                session.close()
                session.store.close()

    def test_error_exits_nonzero(self, config_path):
        with patch("streakboard.cli.build_session", side_effect=lambda: build_session(config_path)):
            with pytest.raises(SystemExit) as exc_info:
                main(["add", "Read"])
        assert exc_info.value.code == 1

    def test_missing_username_exits_nonzero(self, config_path):
        with patch("streakboard.cli.build_session", side_effect=lambda: build_session(config_path)):
            main(["login", "bob"])
            with pytest.raises(SystemExit):
                main(["calendar"])
