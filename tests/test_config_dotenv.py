from __future__ import annotations

import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from lib_log_discord import cli as cli_module
from lib_log_discord import config as config_module


def test_enable_dotenv_populates_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Loading the nearest .env injects values into the process environment."""

    nested = tmp_path / "nested"
    nested.mkdir()
    env_file = tmp_path / ".env"
    env_file.write_text("DISCORD_WEBHOOK_URL=https://dotenv.example/hook\n")
    monkeypatch.chdir(nested)

    loaded = config_module.enable_dotenv()

    assert loaded == env_file.resolve()
    assert os.environ["DISCORD_WEBHOOK_URL"] == "https://dotenv.example/hook"
    os.environ.pop("DISCORD_WEBHOOK_URL", None)


def test_enable_dotenv_respects_existing_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Existing environment variables keep precedence over .env entries."""

    (tmp_path / ".env").write_text("DISCORD_WEBHOOK_USERNAME=dotenv-bot\n")
    monkeypatch.setenv("DISCORD_WEBHOOK_USERNAME", "real-bot")

    result = config_module.enable_dotenv(tmp_path)

    assert result == (tmp_path / ".env").resolve()
    assert os.environ["DISCORD_WEBHOOK_USERNAME"] == "real-bot"


def test_enable_dotenv_caches_first_load(tmp_path: Path) -> None:
    first = tmp_path / "a"
    second = tmp_path / "b"
    first.mkdir()
    second.mkdir()
    (first / ".env").write_text("")
    (second / ".env").write_text("")

    assert config_module.enable_dotenv(first) == (first / ".env").resolve()
    assert config_module.enable_dotenv(second) == (first / ".env").resolve()


def test_cli_dotenv_toggle_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    """CLI flag wins over environment toggle when deciding whether to load .env."""

    calls: list[object] = []
    monkeypatch.setattr(config_module, "enable_dotenv", lambda search_from=None: calls.append(search_from))
    monkeypatch.setenv(config_module.DOTENV_ENV_VAR, "1")
    runner = CliRunner()

    assert runner.invoke(cli_module.cli, ["--no-use-dotenv", "info"]).exit_code == 0
    assert calls == []

    assert runner.invoke(cli_module.cli, ["info"]).exit_code == 0
    assert calls == [None]

    monkeypatch.delenv(config_module.DOTENV_ENV_VAR)
    assert runner.invoke(cli_module.cli, ["--use-dotenv", "info"]).exit_code == 0
    assert calls == [None, None]
