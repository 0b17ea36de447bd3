"""Parsing helpers for ``[ADDRESS/]INTERFACE[.METHOD]`` targets."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

INTERFACE_RE = re.compile(r"^[A-Za-z]([-]*[A-Za-z0-9])*(\.[A-Za-z0-9]([-]*[A-Za-z0-9])*)+$")
METHOD_RE = re.compile(r"^[A-Z][A-Za-z0-9]*$")


class TargetError(ValueError):
    """Raised when a target token cannot be parsed."""


@dataclass(frozen=True)
class QualifiedTarget:
    interface: str
    method: Optional[str] = None
    address: Optional[str] = None

    @property
    def qualified_member(self) -> Optional[str]:
        if not self.method:
            return None
        return f"{self.interface}.{self.method}"

    def __str__(self) -> str:
        member = self.qualified_member or self.interface
        return f"{self.address}/{member}" if self.address else member


def is_interface_name(name: str) -> bool:
    return bool(INTERFACE_RE.match(name))


def split_address(text: str) -> Tuple[Optional[str], str]:
    """Split ``ADDRESS/REST`` at the last slash; the address may be absent."""
    address, sep, rest = text.rpartition("/")
    if not sep:
        return None, text
    return address or None, rest


def parse_target(text: str, *, require_method: bool = False) -> QualifiedTarget:
    """Parse a target token.

    When the last dotted component looks like a method name it is split off,
    otherwise the whole member is treated as the interface and ``method`` is
    left empty. ``require_method`` turns a missing method into an error.
    """
    if not text:
        raise TargetError("empty target")
    address, member = split_address(text)
    if "/" in text and not address:
        raise TargetError(f"empty address in {text!r}")
    interface, method = member, None
    head, dot, tail = member.rpartition(".")
    if dot and METHOD_RE.match(tail) and is_interface_name(head):
        interface, method = head, tail
    if not is_interface_name(interface):
        raise TargetError(f"invalid interface name {interface!r}")
    if require_method and method is None:
        raise TargetError(f"missing method in {text!r}")
    return QualifiedTarget(interface=interface, method=method, address=address)


__all__ = ["QualifiedTarget", "TargetError", "is_interface_name", "parse_target", "split_address"]
