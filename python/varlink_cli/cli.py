"""varlink-cli entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

from . import __version__
from .commands import CommandRegistry, build_registry
from .commands.base import PROG
from .context import CliContext
from .errors import CliError, exit_code

LOG = logging.getLogger("varlink_cli.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _commands_epilog(registry: CommandRegistry) -> str:
    lines = ["Commands:"]
    lines.extend(command.format_help() for command in registry.list_commands())
    lines.append("")
    lines.append(f"Run '{PROG} COMMAND --help' for the options of a command.")
    return "\n".join(lines)


def build_arg_parser(registry: CommandRegistry | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Call methods of varlink services and inspect their interfaces",
        epilog=_commands_epilog(registry) if registry else None,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--resolver",
        default=None,
        help="Resolver address (default $VARLINK_RESOLVER or unix:/run/org.varlink.resolver)",
    )
    parser.add_argument("--timeout", type=float, help="Connect and read timeout in seconds")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("VARLINK_CLI_LOG", "WARNING"),
        help="Logging level (default WARNING)",
    )
    parser.add_argument(
        "--history",
        type=Path,
        default=Path.home() / ".varlink-cli-history",
        help="Path to command history file (shell command)",
    )
    parser.add_argument("command", nargs="?", help="Command to run")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments of the command")
    return parser


def build_context(args: argparse.Namespace) -> CliContext:
    kwargs: Dict[str, Any] = {"timeout": args.timeout, "history_path": args.history}
    if args.resolver:
        kwargs["resolver_address"] = args.resolver
    if args.no_color:
        kwargs["color"] = False
    return CliContext(**kwargs)


def main(argv: List[str] | None = None) -> int:
    registry = build_registry()
    parser = build_arg_parser(registry)
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    ctx = build_context(args)
    if not args.command:
        print(parser.format_usage().rstrip(), file=sys.stderr)
        print(f"Missing command. Try '{PROG} --help' for more information.", file=sys.stderr)
        return int(CliError.MISSING_COMMAND)
    command = registry.get(args.command)
    if not command:
        print(f"Command not found: {args.command}", file=sys.stderr)
        return int(CliError.COMMAND_NOT_FOUND)
    try:
        return command.run(ctx, list(args.args))
    except SystemExit as exc:
        return int(exc.code or 0)
    except KeyboardInterrupt:
        return exit_code(CliError.CANCELED)
    except Exception as exc:
        LOG.exception("command %s failed", args.command)
        print(f"Command '{args.command}' failed: {exc}", file=sys.stderr)
        return int(CliError.PANIC)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
