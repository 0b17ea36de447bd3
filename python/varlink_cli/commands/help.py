"""``help`` command: describe a remote interface."""

from __future__ import annotations

import logging
import sys
from typing import List

from varlinkkit.errors import TransportError
from varlinkkit.interface import InterfaceSyntaxError, format_interface, parse_interface
from varlinkkit.resolver import RemoteCallError, get_interface_description
from varlinkkit.transport import Connection
from varlinkkit.uri import split_address

from .base import HELP_OPTION, PROG, Command
from ..completion import complete_interfaces
from ..context import CliContext
from ..errors import CliError, CliFailure
from ..options import complete_options, parse_options
from ..output import emit

LOGGER = logging.getLogger("varlink_cli.help")

HELP_WIDTH = 72 - 2


def render_interface_help(ctx: CliContext, connection: Connection, interface: str) -> int:
    """Fetch the description of ``interface`` over ``connection`` and print it.

    A remote error is reported on stdout and is not fatal. Returns a
    ``CliError`` value for local failures, 0 otherwise.
    """
    try:
        description = get_interface_description(connection, interface)
    except RemoteCallError as exc:
        print(f"Error: {exc.error}")
        return 0
    except TransportError as exc:
        LOGGER.debug("introspection of %s failed: %s", interface, exc)
        print(f"Unable to get interface description: {exc}", file=sys.stderr)
        return int(CliError.CALL_FAILED)
    try:
        model = parse_interface(description)
    except InterfaceSyntaxError as exc:
        print(f"Unable to parse interface description: {exc}", file=sys.stderr)
        return int(CliError.PANIC)
    emit(ctx, format_interface(model, HELP_WIDTH))
    return 0


class HelpCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "help",
            "Print interface description or service information",
            usage="[ADDRESS/]INTERFACE",
            options={"help": HELP_OPTION},
        )

    def run(self, ctx: CliContext, argv: List[str]) -> int:
        try:
            result = parse_options(self.options, argv)
        except CliFailure as exc:
            print(f"{exc}", file=sys.stderr)
            print(f"Try '{PROG} --help' for more information", file=sys.stderr)
            return int(exc.error)
        if result.flag("help"):
            self.print_usage(summary="Prints information about INTERFACE.")
            return 0
        if not result.positionals:
            print(f"Usage: {self.usage_line()}", file=sys.stderr)
            return int(CliError.MISSING_ARGUMENT)

        address, interface = split_address(result.positionals[0])
        if not address:
            try:
                address = ctx.resolve(interface)
            except CliFailure:
                print(f"Error resolving interface {interface}", file=sys.stderr)
                return int(CliError.CANNOT_RESOLVE)
        try:
            connection = ctx.connect(address)
        except CliFailure:
            print(f"Error connecting to {address}", file=sys.stderr)
            return int(CliError.CANNOT_CONNECT)
        with connection:
            try:
                return render_interface_help(ctx, connection, interface)
            except KeyboardInterrupt:
                return 0

    def complete(self, ctx: CliContext, argv: List[str], current: str) -> List[str]:
        if current.startswith("-"):
            return complete_options(self.options, current)
        if any(not token.startswith("-") for token in argv):
            return []
        return complete_interfaces(ctx, current)


__all__ = ["HELP_WIDTH", "HelpCommand", "render_interface_help"]
