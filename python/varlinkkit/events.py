"""Typed reply events for varlink calls."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .errors import ProtocolError


@dataclass
class ReplyEvent:
    error: Optional[str] = None
    parameters: Any = field(default_factory=dict)
    continues: bool = False

    @property
    def is_error(self) -> bool:
        return self.error is not None


ReplyHandler = Callable[[ReplyEvent], None]


def parse_reply(message: Any) -> ReplyEvent:
    """Convert a decoded reply message into a ``ReplyEvent``.

    Parameters are passed through untouched (an absent block becomes an empty
    object) so that rendering can decide whether they are presentable.
    """
    if not isinstance(message, dict):
        raise ProtocolError(f"reply is not an object: {message!r}")
    error = message.get("error")
    if error is not None and not isinstance(error, str):
        raise ProtocolError(f"invalid error name: {error!r}")
    parameters = message.get("parameters")
    if parameters is None:
        parameters = {}
    return ReplyEvent(error=error, parameters=parameters, continues=bool(message.get("continues")))


def build_call(method: str, parameters: Optional[Dict[str, Any]] = None, *, more: bool = False) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"method": method}
    if parameters:
        payload["parameters"] = parameters
    if more:
        payload["more"] = True
    return payload


__all__ = ["ReplyEvent", "ReplyHandler", "build_call", "parse_reply"]
