"""Configuration helpers: environment variables and optional ``.env`` loading.

Purpose
-------
Resolve the hook settings from explicit arguments first and ``DISCORD_*``
environment variables second, and optionally populate the environment from
the nearest ``.env`` file via python-dotenv.

Contents
--------
* Environment variable names (``*_ENV_VAR`` constants).
* :class:`HookSettings` and :func:`load_settings`.
* :func:`should_use_dotenv` / :func:`enable_dotenv` for ``.env`` support.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from lib_log_discord.adapters.queue import DROP_POLICIES
from lib_log_discord.application.use_cases.compose import DEFAULT_USERNAME
from lib_log_discord.domain.levels import LogLevel
from lib_log_discord.domain.severity import resolve_levels

WEBHOOK_URL_ENV_VAR = "DISCORD_WEBHOOK_URL"
LEVELS_ENV_VAR = "DISCORD_WEBHOOK_LEVELS"
USERNAME_ENV_VAR = "DISCORD_WEBHOOK_USERNAME"
QUEUE_SIZE_ENV_VAR = "DISCORD_WEBHOOK_QUEUE_SIZE"
QUEUE_POLICY_ENV_VAR = "DISCORD_WEBHOOK_QUEUE_POLICY"
DOTENV_ENV_VAR = "LIB_LOG_DISCORD_USE_DOTENV"

_TRUTHY = {"1", "true", "yes", "on"}

_DOTENV_LOCK = threading.Lock()
_DOTENV_LOADED: Path | None = None


@dataclass(slots=True, frozen=True)
class HookSettings:
    """Resolved configuration for :meth:`WebhookHook.from_settings`."""

    webhook_url: str
    levels: tuple[LogLevel, ...]
    username: str = DEFAULT_USERNAME
    queue_maxsize: int = 0
    queue_policy: str = "block"


def parse_levels(raw: str | Iterable[str | LogLevel] | None) -> tuple[LogLevel, ...]:
    """Parse a comma separated level list (or an iterable) into levels.

    Examples
    --------
    >>> [level.name for level in parse_levels('error, warn')]
    ['ERROR', 'WARNING']
    >>> parse_levels('')
    ()
    """

    if raw is None:
        return ()
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    levels: list[LogLevel] = []
    for item in items:
        if isinstance(item, LogLevel):
            levels.append(item)
            continue
        if not item.strip():
            continue
        levels.append(LogLevel.from_name(item))
    return tuple(levels)


def _parse_queue_size(raw: str | int | None) -> int:
    if raw is None or raw == "":
        return 0
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{QUEUE_SIZE_ENV_VAR} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{QUEUE_SIZE_ENV_VAR} must not be negative, got {value}")
    return value


def _parse_queue_policy(raw: str | None) -> str:
    if raw is None or not raw.strip():
        return "block"
    policy = raw.strip().lower()
    if policy not in DROP_POLICIES:
        raise ValueError(f"{QUEUE_POLICY_ENV_VAR} must be one of {sorted(DROP_POLICIES)}, got {raw!r}")
    return policy


def load_settings(
    *,
    webhook_url: str | None = None,
    levels: str | Iterable[str | LogLevel] | None = None,
    username: str | None = None,
    queue_maxsize: int | None = None,
    queue_policy: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> HookSettings:
    """Resolve :class:`HookSettings`; explicit arguments win over the environment.

    Raises
    ------
    ValueError
        When a level name, queue size, or queue policy cannot be parsed.

    Examples
    --------
    >>> settings = load_settings(environ={'DISCORD_WEBHOOK_URL': 'https://x', 'DISCORD_WEBHOOK_LEVELS': 'error'})
    >>> settings.webhook_url, [level.name for level in settings.levels]
    ('https://x', ['ERROR'])
    >>> load_settings(environ={}).webhook_url
    ''
    """

    env = os.environ if environ is None else environ
    url = webhook_url if webhook_url is not None else env.get(WEBHOOK_URL_ENV_VAR, "")
    raw_levels = levels if levels is not None else env.get(LEVELS_ENV_VAR)
    name = username if username is not None else env.get(USERNAME_ENV_VAR, "") or DEFAULT_USERNAME
    size = _parse_queue_size(queue_maxsize if queue_maxsize is not None else env.get(QUEUE_SIZE_ENV_VAR))
    policy = _parse_queue_policy(queue_policy if queue_policy is not None else env.get(QUEUE_POLICY_ENV_VAR))
    return HookSettings(
        webhook_url=url.strip(),
        levels=resolve_levels(parse_levels(raw_levels)),
        username=name,
        queue_maxsize=size,
        queue_policy=policy,
    )


def should_use_dotenv(*, explicit: bool | None, env_value: str | None) -> bool:
    """Decide whether to load ``.env``: an explicit flag beats the environment toggle.

    Examples
    --------
    >>> should_use_dotenv(explicit=None, env_value='yes')
    True
    >>> should_use_dotenv(explicit=False, env_value='1')
    False
    >>> should_use_dotenv(explicit=None, env_value=None)
    False
    """

    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    return env_value.strip().lower() in _TRUTHY


def enable_dotenv(search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` without overriding existing variables.

    The search walks upward from ``search_from`` (default: the current working
    directory). The first successful load is cached; later calls return the
    same path without re-reading the file.

    Returns
    -------
    Path | None
        Resolved path of the loaded file, or ``None`` when none was found.
    """

    global _DOTENV_LOADED
    with _DOTENV_LOCK:
        if _DOTENV_LOADED is not None:
            return _DOTENV_LOADED
        if search_from is None:
            found = find_dotenv(usecwd=True)
            candidate = Path(found) if found else None
        else:
            candidate = _find_upward(search_from)
        if candidate is None:
            return None
        load_dotenv(candidate, override=False)
        _DOTENV_LOADED = candidate.resolve()
        return _DOTENV_LOADED


def _find_upward(start: Path) -> Path | None:
    current = start.resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def _reset_dotenv_state_for_testing() -> None:
    global _DOTENV_LOADED
    with _DOTENV_LOCK:
        _DOTENV_LOADED = None


__all__ = [
    "DOTENV_ENV_VAR",
    "HookSettings",
    "LEVELS_ENV_VAR",
    "QUEUE_POLICY_ENV_VAR",
    "QUEUE_SIZE_ENV_VAR",
    "USERNAME_ENV_VAR",
    "WEBHOOK_URL_ENV_VAR",
    "enable_dotenv",
    "load_settings",
    "parse_levels",
    "should_use_dotenv",
]
