"""``call`` command: invoke one method and stream its replies."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from varlinkkit.errors import TransportError
from varlinkkit.uri import QualifiedTarget, TargetError, parse_target

from .base import HELP_OPTION, Command
from ..completion import complete_methods
from ..context import CliContext
from ..errors import CliError, CliFailure, exit_code
from ..options import OptionSpec, complete_options, parse_options
from ..params import load_parameters
from ..replies import ReplyStreamProcessor

LOGGER = logging.getLogger("varlink_cli.call")

CALL_OPTIONS = {
    "help": HELP_OPTION,
    "more": OptionSpec("m", "more", "more", help="wait for multiple method returns if supported"),
}
PARAMETER_PLACEHOLDER = "'{}'"


@dataclass(frozen=True)
class CallRequest:
    show_help: bool = False
    more: bool = False
    target: Optional[QualifiedTarget] = None
    raw_parameters: Optional[str] = None


def parse_call_arguments(argv: List[str]) -> CallRequest:
    """Build a ``CallRequest`` from the tokens following ``call``.

    ``--help`` short-circuits everything else. Raises ``CliFailure`` with
    INVALID_ARGUMENT or MISSING_ARGUMENT for user errors and PANIC when the
    option parser reports an effect this command does not know.
    """
    result = parse_options(CALL_OPTIONS, argv)
    more = False
    for effect in result.values:
        if effect == "help":
            return CallRequest(show_help=True)
        if effect == "more":
            more = True
            continue
        raise CliFailure(CliError.PANIC, f"unhandled option effect {effect!r}")
    if not result.positionals:
        raise CliFailure(CliError.MISSING_ARGUMENT, "missing target")
    try:
        target = parse_target(result.positionals[0])
    except TargetError as exc:
        raise CliFailure(CliError.INVALID_ARGUMENT, str(exc)) from exc
    raw = result.positionals[1] if len(result.positionals) > 1 else None
    return CallRequest(more=more, target=target, raw_parameters=raw)


class CallCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "call",
            "Call a method",
            usage="[ADDRESS/]INTERFACE.METHOD [ARGUMENTS]",
            options=CALL_OPTIONS,
        )

    def run(self, ctx: CliContext, argv: List[str]) -> int:
        try:
            request = parse_call_arguments(argv)
        except CliFailure as exc:
            if exc.error is CliError.MISSING_ARGUMENT:
                print("Missing argument, INTERFACE.METHOD [ARGUMENTS] expected", file=sys.stderr)
            elif exc.error is CliError.INVALID_ARGUMENT:
                print("Invalid argument, INTERFACE.METHOD [ARGUMENTS] expected", file=sys.stderr)
            else:
                print("Unknown error.", file=sys.stderr)
                return int(CliError.PANIC)
            return int(exc.error)

        if request.show_help:
            self.print_usage(summary="Call METHOD on INTERFACE at ADDRESS. ARGUMENTS must be valid JSON.")
            return 0

        target = request.target
        assert target is not None
        member = target.qualified_member
        if not member:
            print("Missing method.", file=sys.stderr)
            return int(CliError.INVALID_ARGUMENT)

        try:
            parameters = load_parameters(request.raw_parameters, ctx.stdin)
        except CliFailure:
            print("Unable to parse input parameters, must be valid JSON", file=sys.stderr)
            return int(CliError.INVALID_JSON)

        try:
            connection = ctx.connect(target.address, target.interface)
        except CliFailure as exc:
            if exc.error is CliError.CANNOT_RESOLVE:
                print(f"Error resolving interface {target.interface}", file=sys.stderr)
            else:
                print(f"Unable to connect: {exc}", file=sys.stderr)
            return int(exc.error)

        with connection:
            processor = ReplyStreamProcessor(ctx, connection, more=request.more)
            try:
                connection.call(member, parameters, more=request.more, handler=processor)
            except TransportError as exc:
                print(f"Unable to call: {exc}", file=sys.stderr)
                return int(CliError.CALL_FAILED)
            try:
                ctx.process_all_events(connection)
            except CliFailure as exc:
                if exc.error is CliError.CANCELED:
                    processor.cancel()
                    LOGGER.debug("call %s canceled", member)
                    return exit_code(exc.error)
                if exc.error is CliError.CONNECTION_CLOSED:
                    print("Connection closed.", file=sys.stderr)
                else:
                    print(f"Unable to process events: {exc}", file=sys.stderr)
                return int(exc.error)
        return processor.exit_code

    def complete(self, ctx: CliContext, argv: List[str], current: str) -> List[str]:
        try:
            request: Optional[CallRequest] = parse_call_arguments(argv)
        except CliFailure as exc:
            if exc.error not in (CliError.INVALID_ARGUMENT, CliError.MISSING_ARGUMENT):
                return []
            request = None
        if current.startswith("-"):
            return complete_options(self.options, current)
        if request is None or request.target is None or not request.target.qualified_member:
            return complete_methods(ctx, current)
        if request.raw_parameters is None and PARAMETER_PLACEHOLDER.startswith(current):
            return [PARAMETER_PLACEHOLDER]
        return []


__all__ = ["CallCommand", "CallRequest", "parse_call_arguments"]
