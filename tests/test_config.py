from __future__ import annotations

import pytest

from lib_log_discord import config as config_module
from lib_log_discord.application.use_cases.compose import DEFAULT_USERNAME
from lib_log_discord.domain.levels import LogLevel
from lib_log_discord.domain.severity import DEFAULT_LEVELS


def test_load_settings_reads_environment() -> None:
    settings = config_module.load_settings(
        environ={
            "DISCORD_WEBHOOK_URL": " https://discord.example/api/webhooks/1/abc ",
            "DISCORD_WEBHOOK_LEVELS": "error,warn",
            "DISCORD_WEBHOOK_USERNAME": "alerts",
            "DISCORD_WEBHOOK_QUEUE_SIZE": "64",
            "DISCORD_WEBHOOK_QUEUE_POLICY": "DROP_OLDEST",
        }
    )

    assert settings.webhook_url == "https://discord.example/api/webhooks/1/abc"
    assert settings.levels == (LogLevel.ERROR, LogLevel.WARNING)
    assert settings.username == "alerts"
    assert settings.queue_maxsize == 64
    assert settings.queue_policy == "drop_oldest"


def test_load_settings_defaults() -> None:
    settings = config_module.load_settings(environ={})

    assert settings.webhook_url == ""
    assert settings.levels == DEFAULT_LEVELS
    assert settings.username == DEFAULT_USERNAME
    assert settings.queue_maxsize == 0
    assert settings.queue_policy == "block"


def test_explicit_arguments_win_over_environment() -> None:
    settings = config_module.load_settings(
        webhook_url="https://explicit",
        levels=[LogLevel.INFO],
        username="cli",
        environ={"DISCORD_WEBHOOK_URL": "https://env", "DISCORD_WEBHOOK_LEVELS": "error", "DISCORD_WEBHOOK_USERNAME": "env"},
    )

    assert settings.webhook_url == "https://explicit"
    assert settings.levels == (LogLevel.INFO,)
    assert settings.username == "cli"


def test_load_settings_falls_back_to_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(config_module.WEBHOOK_URL_ENV_VAR, "https://from-os-environ")

    assert config_module.load_settings().webhook_url == "https://from-os-environ"


@pytest.mark.parametrize(
    "environ, message",
    [
        ({"DISCORD_WEBHOOK_LEVELS": "verbose"}, "Unknown log level"),
        ({"DISCORD_WEBHOOK_QUEUE_SIZE": "many"}, "must be an integer"),
        ({"DISCORD_WEBHOOK_QUEUE_SIZE": "-1"}, "must not be negative"),
        ({"DISCORD_WEBHOOK_QUEUE_POLICY": "random"}, "must be one of"),
    ],
)
def test_invalid_values_are_rejected(environ: dict[str, str], message: str) -> None:
    with pytest.raises(ValueError, match=message):
        config_module.load_settings(environ=environ)


def test_parse_levels_skips_blank_entries() -> None:
    assert config_module.parse_levels("error,, ,panic") == (LogLevel.ERROR, LogLevel.PANIC)
    assert config_module.parse_levels([LogLevel.DEBUG, "info"]) == (LogLevel.DEBUG, LogLevel.INFO)
