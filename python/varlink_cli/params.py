"""Loading call parameters from the command line or standard input."""

from __future__ import annotations

import json
from typing import Any, BinaryIO, Dict, Optional, TextIO, Union

from .errors import CliError, CliFailure

STDIN_SENTINEL = "-"
MIN_READ_SIZE = 1024


def read_to_end(stream: Union[BinaryIO, TextIO], *, minimum: int = MIN_READ_SIZE) -> str:
    """Read ``stream`` until end-of-file, doubling the read size as it fills."""
    source = getattr(stream, "buffer", stream)
    collected = bytearray()
    size = minimum
    while True:
        chunk = source.read(size)
        if not chunk:
            break
        collected += chunk.encode("utf-8") if isinstance(chunk, str) else chunk
        if len(collected) >= size:
            size *= 2
    try:
        return collected.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CliFailure(CliError.INVALID_JSON, f"input is not UTF-8: {exc}") from exc


def parse_parameters(text: str) -> Dict[str, Any]:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CliFailure(CliError.INVALID_JSON, str(exc)) from exc
    if not isinstance(value, dict):
        raise CliFailure(CliError.INVALID_JSON, "parameters must be a JSON object")
    return value


def load_parameters(raw: Optional[str], stdin: Union[BinaryIO, TextIO, None] = None) -> Optional[Dict[str, Any]]:
    """Resolve the raw ARGUMENTS token into a parameter object.

    ``None`` or empty text means no parameters; ``-`` reads the JSON text from
    ``stdin``. Malformed input raises ``CliFailure`` with INVALID_JSON.
    """
    if not raw:
        return None
    if raw == STDIN_SENTINEL:
        if stdin is None:
            raise CliFailure(CliError.INVALID_JSON, "no standard input available")
        raw = read_to_end(stdin)
    return parse_parameters(raw)


__all__ = ["MIN_READ_SIZE", "STDIN_SENTINEL", "load_parameters", "parse_parameters", "read_to_end"]
