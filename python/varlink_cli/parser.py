"""Command-line splitting helpers for the interactive shell."""

from __future__ import annotations

import shlex
from typing import List, Tuple


def split_command(line: str) -> List[str]:
    """Split a command line into argv tokens using shlex rules."""
    if not line:
        return []
    try:
        return shlex.split(line, comments=False, posix=True)
    except ValueError as exc:
        # Return the raw line as a single token so callers can raise a friendlier error.
        return [line.strip(), f"#parse-error:{exc}"]


def split_partial(text: str) -> Tuple[List[str], str]:
    """Split text typed so far into completed tokens and the token being typed."""
    if not text:
        return [], ""
    try:
        tokens = shlex.split(text, posix=True)
    except ValueError:
        tokens = text.split()
    if text[-1].isspace() or not tokens:
        return tokens, ""
    return tokens[:-1], tokens[-1]


__all__ = ["split_command", "split_partial"]
