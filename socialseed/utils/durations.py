"""
Parsing of Go-style duration strings ("15m", "1h30m", "250ms", "2.5s").

Pool lifetimes are configured this way in the environment, so the CLI accepts
the same notation operators already use for the Go services sharing this
database.
"""

from __future__ import annotations

import re
from typing import Union

from socialseed.errors import ConfigError

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # U+00B5 micro sign
    "μs": 1e-6,  # U+03BC Greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Convert a duration to seconds.

    Numbers are taken as seconds. Strings follow Go's ``time.ParseDuration``
    grammar: a sequence of decimal numbers each with a unit suffix, with ``"0"``
    allowed bare. Negative durations are rejected.

    Raises
    ------
    ConfigError
        If the value cannot be parsed or is negative.
    """
    if isinstance(value, bool):
        raise ConfigError(f"invalid duration {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip()
        if text.startswith("-"):
            raise ConfigError(f"duration must not be negative: {value!r}")
        text = text.lstrip("+")
        if not text:
            raise ConfigError("empty duration")
        if text == "0":
            return 0.0
        seconds = 0.0
        pos = 0
        for match in _COMPONENT.finditer(text):
            if match.start() != pos:
                break
            seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
            pos = match.end()
        if pos != len(text):
            raise ConfigError(f"invalid duration {value!r}")
    if seconds < 0:
        raise ConfigError(f"duration must not be negative: {value!r}")
    return seconds


__all__ = ["parse_duration"]
