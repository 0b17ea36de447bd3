"""Output helpers for varlink-cli."""

from __future__ import annotations

import json
import sys
from typing import Any, List, Optional, Sequence, TextIO, Tuple

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText, fragment_list_to_text
from prompt_toolkit.styles import Style

from .context import CliContext

Fragment = Tuple[str, str]

STYLE = Style.from_dict(
    {
        "json.key": "ansicyan",
        "json.string": "ansimagenta",
        "idl.comment": "ansiblue",
        "idl.keyword": "ansimagenta",
        "idl.name": "ansigreen",
        "idl.type": "ansicyan",
    }
)


class RenderError(ValueError):
    """Raised when reply parameters cannot be presented as a JSON object."""


def _scalar(value: Any) -> str:
    try:
        return json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise RenderError(f"cannot format {value!r}: {exc}") from exc


def json_fragments(value: Any, indent: int = 0) -> List[Fragment]:
    """Pretty-print ``value`` as fragments; the text matches ``json.dumps(indent=2)``."""
    pad = "  " * (indent + 1)
    closing = "  " * indent
    if isinstance(value, dict):
        if not value:
            return [("", "{}")]
        fragments: List[Fragment] = [("", "{\n")]
        for idx, (key, item) in enumerate(value.items()):
            if not isinstance(key, str):
                raise RenderError(f"object key {key!r} is not a string")
            fragments.extend([("", pad), ("class:json.key", _scalar(key)), ("", ": ")])
            fragments.extend(json_fragments(item, indent + 1))
            fragments.append(("", ",\n" if idx + 1 < len(value) else "\n"))
        fragments.append(("", closing + "}"))
        return fragments
    if isinstance(value, list):
        if not value:
            return [("", "[]")]
        fragments = [("", "[\n")]
        for idx, item in enumerate(value):
            fragments.append(("", pad))
            fragments.extend(json_fragments(item, indent + 1))
            fragments.append(("", ",\n" if idx + 1 < len(value) else "\n"))
        fragments.append(("", closing + "]"))
        return fragments
    if isinstance(value, str):
        return [("class:json.string", _scalar(value))]
    return [("", _scalar(value))]


def format_parameters(parameters: Any) -> List[Fragment]:
    """Fragments for a reply's parameter object."""
    if not isinstance(parameters, dict):
        raise RenderError(f"parameters must be an object, got {type(parameters).__name__}")
    return json_fragments(parameters)


def emit(ctx: CliContext, fragments: Sequence[Fragment], *, file: Optional[TextIO] = None) -> None:
    """Print styled fragments, dropping the styling when colour is off."""
    stream = file or sys.stdout
    if ctx.color:
        print_formatted_text(FormattedText(list(fragments)), style=STYLE, file=stream)
    else:
        print(fragment_list_to_text(list(fragments)), file=stream)
    stream.flush()


__all__ = ["RenderError", "STYLE", "emit", "format_parameters", "json_fragments"]
