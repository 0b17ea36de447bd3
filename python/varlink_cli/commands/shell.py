"""``shell`` command: interactive prompt over the other commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from .base import HELP_OPTION, Command
from ..context import CliContext
from ..errors import CliFailure
from ..options import parse_options
from ..repl import CliREPL

if TYPE_CHECKING:  # pragma: no cover
    from . import CommandRegistry


class ShellCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "shell",
            "Run commands interactively with completion",
            options={"help": HELP_OPTION},
        )
        self._registry: CommandRegistry | None = None

    def bind(self, registry: "CommandRegistry") -> None:
        self._registry = registry

    def run(self, ctx: CliContext, argv: List[str]) -> int:
        try:
            result = parse_options(self.options, argv)
        except CliFailure as exc:
            print(f"{exc}")
            return int(exc.error)
        if result.flag("help"):
            self.print_usage(summary="Reads commands from the terminal; 'exit' or Ctrl-D leaves.")
            return 0
        if self._registry is None:
            return 1
        return CliREPL(ctx, self._registry).run()


__all__ = ["ShellCommand"]
