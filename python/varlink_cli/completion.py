"""Completion engine for varlink-cli.

The functions here are side-effect free apart from the catalog lookups they
need (listing interfaces and methods of a service). Any failure means "no
suggestions".
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from varlinkkit.errors import TransportError
from varlinkkit.interface import InterfaceSyntaxError
from varlinkkit.uri import split_address

from .context import CliContext
from .errors import CliFailure
from .parser import split_partial

if TYPE_CHECKING:  # pragma: no cover
    from .commands import CommandRegistry

LOGGER = logging.getLogger("varlink_cli.completion")

CATALOG_ERRORS = (CliFailure, TransportError, InterfaceSyntaxError, OSError)


def _matching(candidates: Iterable[str], prefix: str) -> List[str]:
    return sorted({entry for entry in candidates if entry.startswith(prefix)})


def complete_interfaces(ctx: CliContext, current: str) -> List[str]:
    """Interface names (optionally ``ADDRESS/``-prefixed) matching ``current``."""
    address, member = split_address(current)
    prefix = f"{address}/" if address else ""
    try:
        interfaces = ctx.list_interfaces(address)
    except CATALOG_ERRORS as exc:
        LOGGER.debug("interface listing failed: %s", exc)
        return []
    return _matching((prefix + name for name in interfaces), prefix + member)


def complete_methods(ctx: CliContext, current: str) -> List[str]:
    """``INTERFACE.METHOD`` names matching ``current``.

    Until a known interface has been typed in full, interface names with a
    trailing dot are offered; afterwards the interface's methods are listed.
    """
    address, member = split_address(current)
    prefix = f"{address}/" if address else ""
    try:
        interfaces = ctx.list_interfaces(address)
    except CATALOG_ERRORS as exc:
        LOGGER.debug("interface listing failed: %s", exc)
        return []
    candidates: List[str] = []
    for name in interfaces:
        if member.startswith(name + "."):
            try:
                methods = ctx.list_methods(name, address)
            except CATALOG_ERRORS as exc:
                LOGGER.debug("method listing for %s failed: %s", name, exc)
                continue
            candidates.extend(f"{prefix}{name}.{method}" for method in methods)
        elif name.startswith(member):
            candidates.append(f"{prefix}{name}.")
    return _matching(candidates, current)


def complete_line(ctx: CliContext, registry: "CommandRegistry", argv: List[str], current: str) -> List[str]:
    """Suggestions for a whole command line: command name first, then its arguments."""
    if not argv:
        return _matching(registry.names(), current)
    command = registry.get(argv[0])
    if command is None:
        return []
    try:
        return command.complete(ctx, list(argv[1:]), current)
    except CATALOG_ERRORS as exc:
        LOGGER.debug("completion for %s failed: %s", argv[0], exc)
        return []


class CliCompleter(Completer):
    """prompt_toolkit adapter over ``complete_line`` for the interactive shell."""

    def __init__(self, ctx: CliContext, registry: "CommandRegistry") -> None:
        self.ctx = ctx
        self.registry = registry

    def get_completions(self, document: Document, complete_event: Optional[object]) -> Iterable[Completion]:
        argv, current = split_partial(document.text_before_cursor)
        for entry in complete_line(self.ctx, self.registry, argv, current):
            yield Completion(entry, start_position=-len(current))


__all__ = ["CliCompleter", "complete_interfaces", "complete_line", "complete_methods"]
