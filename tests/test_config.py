# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from taskmaster_bot.config import load_config

CONFIG_YAML = """\
log_level: DEBUG
data_dir: {data_dir}
bot:
  token: ${{TEST_TASKMASTER_TOKEN}}
roles:
  manager: Lead
alerts:
  interval_seconds: 60
storage:
  db_path: ${{data_dir}}/bot.db
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_interpolates_env_and_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_TASKMASTER_TOKEN", "123:abc")
    path = _write(tmp_path, CONFIG_YAML.format(data_dir=tmp_path / "data"))

    config = load_config(path, tmp_path / "missing.env")

    assert config.bot.token == "123:abc"
    assert config.bot.platform == "telegram"
    assert config.storage.db_path == f"{tmp_path / 'data'}/bot.db"
    assert config.roles.manager == "Lead"
    assert config.roles.engineer == "Engineer"
    assert config.alerts.interval_seconds == 60
    assert config.alerts.run_on_startup is True


def test_load_config_reads_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TEST_TASKMASTER_TOKEN", raising=False)
    env = tmp_path / ".env"
    env.write_text("TEST_TASKMASTER_TOKEN=from-dotenv\n", encoding="utf-8")
    path = _write(tmp_path, CONFIG_YAML.format(data_dir=tmp_path))

    try:
        assert load_config(path, env).bot.token == "from-dotenv"
    finally:
        monkeypatch.delenv("TEST_TASKMASTER_TOKEN", raising=False)


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml", tmp_path / ".env")


def test_interval_must_be_positive(tmp_path: Path) -> None:
    path = _write(tmp_path, "bot:\n  token: x\nalerts:\n  interval_seconds: 0\n")
    with pytest.raises(ValidationError):
        load_config(path, tmp_path / ".env")
