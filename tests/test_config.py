"""Tests for the config module."""
import json
from pathlib import Path

from streakboard.config import (
    DEFAULT_DB_PATH,
    get_db_path,
    get_leaderboard_size,
    is_strict_dates,
    load_config,
    save_config,
    update_config,
)


class TestLoadConfig:
    def test_missing_file_returns_empty(self, tmp_path):
        assert load_config(tmp_path / "nonexistent.json") == {}

    def test_invalid_json_returns_empty(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("not json", encoding="utf-8")
        assert load_config(path) == {}

    def test_non_object_returns_empty(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_config(path) == {}

    def test_loads_valid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text('{"key": "value"}', encoding="utf-8")
        assert load_config(path) == {"key": "value"}


class TestSaveConfig:
    def test_creates_file(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"hello": "world"}, path)
        assert json.loads(path.read_text()) == {"hello": "world"}

    def test_creates_parent_dirs(self, tmp_path):
        path = tmp_path / "sub" / "dir" / "config.json"
        save_config({"nested": True}, path)
        assert path.exists()


class TestUpdateConfig:
    def test_preserves_other_keys(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"other_key": "keep_me"}, path)
        update_config(path, current_uid="abc")
        assert load_config(path) == {"other_key": "keep_me", "current_uid": "abc"}

    def test_none_removes_key(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"current_uid": "abc"}, path)
        update_config(path, current_uid=None)
        assert load_config(path) == {}


class TestSettings:
    def test_db_path_default(self, tmp_path):
        assert get_db_path(tmp_path / "config.json") == DEFAULT_DB_PATH

    def test_db_path_configured(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"db_path": str(tmp_path / "habits.db")}, path)
        assert get_db_path(path) == tmp_path / "habits.db"

    def test_leaderboard_size_default(self, tmp_path):
        assert get_leaderboard_size(tmp_path / "config.json") == 5

    def test_leaderboard_size_configured(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"leaderboard_size": 10}, path)
        assert get_leaderboard_size(path) == 10

    def test_leaderboard_size_invalid_falls_back(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"leaderboard_size": "lots"}, path)
        assert get_leaderboard_size(path) == 5
        save_config({"leaderboard_size": 0}, path)
        assert get_leaderboard_size(path) == 5

    def test_strict_dates(self, tmp_path):
        path = tmp_path / "config.json"
        assert is_strict_dates(path) is False
        save_config({"strict_dates": True}, path)
        assert is_strict_dates(path) is True


def test_default_paths_under_home():
    assert DEFAULT_DB_PATH.parent == Path.home() / ".streakboard"
