"""``complete`` command: print completions for shell integration."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from .base import Command
from ..completion import complete_line
from ..context import CliContext

if TYPE_CHECKING:  # pragma: no cover
    from . import CommandRegistry


class CompleteCommand(Command):
    """Prints one suggestion per line for ``COMMAND [WORD...] CURRENT``.

    The last word is the one being completed (pass an empty string after a
    trailing space). Failures print nothing.
    """

    hidden = True

    def __init__(self) -> None:
        super().__init__("complete", "Print completions for a command line", usage="[COMMAND [WORD...] CURRENT]")
        self._registry: CommandRegistry | None = None

    def bind(self, registry: "CommandRegistry") -> None:
        self._registry = registry

    def run(self, ctx: CliContext, argv: List[str]) -> int:
        registry = self._registry
        if registry is None:
            return 0
        words = list(argv) or [""]
        for entry in complete_line(ctx, registry, words[:-1], words[-1]):
            print(entry)
        return 0


__all__ = ["CompleteCommand"]
