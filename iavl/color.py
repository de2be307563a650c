"""ANSI colouring helpers for human-readable byte dumps."""

from __future__ import annotations

import os
from typing import Any, Callable

ANSI_RESET = "\x1b[0m"
ANSI_BRIGHT = "\x1b[1m"

ANSI_FG_GREEN = "\x1b[32m"
ANSI_FG_BLUE = "\x1b[34m"
ANSI_FG_CYAN = "\x1b[36m"

COLORS_ENV_VAR = "TENDERMINT_IAVL_COLORS_ON"


def _treat(s: str, color: str) -> str:
    """Wrap ``s`` in ``color`` unless it is already coloured."""
    if len(s) > 2 and s.startswith("\x1b["):
        return s
    return color + s + ANSI_RESET


def _treat_all(color: str, *args: Any) -> str:
    return "".join(_treat(str(arg), color) for arg in args)


def green(*args: Any) -> str:
    """Colour each argument green and join them."""
    return _treat_all(ANSI_FG_GREEN, *args)


def blue(*args: Any) -> str:
    """Colour each argument blue and join them."""
    return _treat_all(ANSI_FG_BLUE, *args)


def cyan(*args: Any) -> str:
    """Colour each argument cyan and join them."""
    return _treat_all(ANSI_FG_CYAN, *args)


def colored_bytes(
    data: bytes,
    text_color: Callable[..., str],
    bytes_color: Callable[..., str],
) -> str:
    """Render ``data`` for humans.

    When the colours environment variable is set to a non-empty value,
    printable characters are coloured with ``text_color`` and every other byte
    is shown as two hex digits coloured with ``bytes_color``. Otherwise the
    bytes are returned as plain text.
    """
    if not os.environ.get(COLORS_ENV_VAR, ""):
        return bytes(data).decode("utf-8", errors="replace")
    parts = []
    for b in data:
        if 0x21 <= b < 0x7F:
            parts.append(text_color(chr(b)))
        else:
            parts.append(bytes_color(f"{b:02X}"))
    return "".join(parts)