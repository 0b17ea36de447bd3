"""Command base classes for varlink-cli."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List, Sequence

from ..context import CliContext
from ..options import OptionSchema, OptionSpec, complete_options, validate_schema

PROG = "varlink-cli"
HELP_OPTION = OptionSpec("h", "help", "help", stops=True, help="display this help text and exit")


@dataclass
class Command:
    """Abstract command description."""

    name: str
    description: str
    usage: str = ""
    aliases: Sequence[str] = field(default_factory=tuple)
    options: OptionSchema = field(default_factory=lambda: {"help": HELP_OPTION})
    hidden: ClassVar[bool] = False

    def __post_init__(self) -> None:
        validate_schema(self.options)

    def run(self, ctx: CliContext, argv: List[str]) -> int:
        raise NotImplementedError("Command must implement run()")

    def complete(self, ctx: CliContext, argv: List[str], current: str) -> List[str]:
        """Suggestions for ``current`` given the already typed ``argv``."""
        if current.startswith("-"):
            return complete_options(self.options, current)
        return []

    def format_help(self) -> str:
        return f"  {self.name:<12} {self.description}"

    def print_usage(self, *, summary: str = "") -> None:
        print(f"Usage: {self.usage_line()}")
        if summary:
            print()
            print(summary)
        print()
        for spec in self.options.values():
            print(spec.format_help())

    def usage_line(self) -> str:
        return f"{PROG} {self.name} {self.usage}".rstrip()
