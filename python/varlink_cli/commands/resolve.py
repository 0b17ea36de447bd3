"""``resolve`` command: look up the address serving an interface."""

from __future__ import annotations

import sys
from typing import List

from .base import HELP_OPTION, Command
from ..completion import complete_interfaces
from ..context import CliContext
from ..errors import CliError, CliFailure
from ..options import complete_options, parse_options


class ResolveCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "resolve",
            "Resolve an interface name to a service address",
            usage="INTERFACE",
            options={"help": HELP_OPTION},
        )

    def run(self, ctx: CliContext, argv: List[str]) -> int:
        try:
            result = parse_options(self.options, argv)
        except CliFailure as exc:
            print(f"{exc}", file=sys.stderr)
            return int(exc.error)
        if result.flag("help"):
            self.print_usage(summary="Prints the address of the service implementing INTERFACE.")
            return 0
        if not result.positionals:
            print(f"Usage: {self.usage_line()}", file=sys.stderr)
            return int(CliError.MISSING_ARGUMENT)
        interface = result.positionals[0]
        try:
            address = ctx.resolve(interface)
        except CliFailure as exc:
            print(f"Error resolving interface {interface}: {exc}", file=sys.stderr)
            return int(exc.error)
        print(address)
        return 0

    def complete(self, ctx: CliContext, argv: List[str], current: str) -> List[str]:
        if current.startswith("-"):
            return complete_options(self.options, current)
        if argv:
            return []
        return [entry for entry in complete_interfaces(ctx, current) if "/" not in entry]


__all__ = ["ResolveCommand"]
