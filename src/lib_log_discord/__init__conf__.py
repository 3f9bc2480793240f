"""Static package metadata surfaced by the CLI ``info`` command.

Keep the values in sync with ``pyproject.toml``.
"""

from __future__ import annotations

from collections.abc import Callable

name = "lib_log_discord"
title = "Forward Python log records to Discord webhooks without blocking the caller"
version = "0.1.0"
shell_command = "lib_log_discord"


def print_info(writer: Callable[[str], None] | None = None) -> None:
    """Write the metadata banner line by line.

    Examples
    --------
    >>> print_info()  # doctest: +ELLIPSIS
    Info for lib_log_discord:
    <BLANKLINE>
        Forward Python log records...
    <BLANKLINE>
        name          = lib_log_discord
        version       = 0.1.0
        shell_command = lib_log_discord
    """

    emit = writer if writer is not None else (lambda text: print(text, end=""))
    fields = [("name", name), ("version", version), ("shell_command", shell_command)]
    pad = max(len(label) for label, _ in fields)
    emit(f"Info for {name}:\n\n")
    emit(f"    {title}\n\n")
    for label, value in fields:
        emit(f"    {label.ljust(pad)} = {value}\n")
