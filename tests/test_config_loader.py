import os
import tempfile
from unittest.mock import patch

import pytest

from services.config_loader import DEFAULT_CONFIG, load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("ATTENDANCE_API_BASE", "DASHBOARD_TIMEZONE", "SLACK_NOTIFY_CHANNEL"):
        monkeypatch.delenv(name, raising=False)
    with patch("services.config_loader.load_dotenv"):
        yield


def _write_yaml(text):
    f = tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False)
    f.write(text)
    f.close()
    return f.name


def test_load_config_overrides_value():
    """A value in the file replaces the default"""
    path = _write_yaml("scheduler:\n  refresh_interval_minutes: 10\n")
    config = load_config(path)
    os.unlink(path)
    assert config["scheduler"]["refresh_interval_minutes"] == 10


def test_load_config_keeps_sibling_defaults():
    """Nested sections are merged, not replaced"""
    path = _write_yaml("shift_rules:\n  cutoff_hour: 6\n")
    config = load_config(path)
    os.unlink(path)
    assert config["shift_rules"]["cutoff_hour"] == 6
    assert config["shift_rules"]["shift_start_hour"] == 14
    assert config["api"]["base_url"] == "http://localhost:3001"


def test_load_config_file_not_found():
    """A missing file yields the defaults"""
    config = load_config("nonexistent.yaml")
    assert config["history"]["default_days"] == 30
    assert config["events"]["default_days"] == 7
    assert config["timezone"] is None


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("ATTENDANCE_API_BASE", "http://attendance.internal:3001/")
    monkeypatch.setenv("DASHBOARD_TIMEZONE", "Asia/Karachi")
    config = load_config("nonexistent.yaml")
    assert config["api"]["base_url"] == "http://attendance.internal:3001"
    assert config["timezone"] == "Asia/Karachi"


def test_defaults_not_mutated(monkeypatch):
    monkeypatch.setenv("ATTENDANCE_API_BASE", "http://other:9000")
    load_config("nonexistent.yaml")
    assert DEFAULT_CONFIG["api"]["base_url"] == "http://localhost:3001"
