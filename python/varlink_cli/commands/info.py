"""``info`` command: show what a service reports about itself."""

from __future__ import annotations

import sys
from typing import List

from varlinkkit.errors import TransportError
from varlinkkit.resolver import get_info

from .base import HELP_OPTION, Command
from ..context import CliContext
from ..errors import CliError, CliFailure
from ..options import parse_options

INFO_FIELDS = ("vendor", "product", "version", "url")


class InfoCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "info",
            "Print information about a service",
            usage="[ADDRESS]",
            options={"help": HELP_OPTION},
        )

    def run(self, ctx: CliContext, argv: List[str]) -> int:
        try:
            result = parse_options(self.options, argv)
        except CliFailure as exc:
            print(f"{exc}", file=sys.stderr)
            return int(exc.error)
        if result.flag("help"):
            self.print_usage(summary="Prints information about the service running at ADDRESS.")
            return 0
        address = result.positionals[0] if result.positionals else ctx.resolver_address
        try:
            connection = ctx.connect(address)
        except CliFailure as exc:
            print(f"Unable to connect: {exc}", file=sys.stderr)
            return int(exc.error)
        with connection:
            try:
                info = get_info(connection)
            except TransportError as exc:
                print(f"Unable to get service information: {exc}", file=sys.stderr)
                return int(CliError.CALL_FAILED)
        for key in INFO_FIELDS:
            print(f"{key.capitalize() + ':':<9} {info.get(key, '')}")
        print("Interfaces:")
        for name in info.get("interfaces") or []:
            print(f"  {name}")
        return 0


__all__ = ["InfoCommand"]
