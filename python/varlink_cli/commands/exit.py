"""Exit command for the interactive shell."""

from __future__ import annotations

from typing import List

from .base import Command
from ..context import CliContext


class ExitCommand(Command):
    hidden = True

    def __init__(self) -> None:
        super().__init__("exit", "Leave the interactive shell", aliases=("quit", "q"))

    def run(self, ctx: CliContext, argv: List[str]) -> int:
        raise SystemExit(0)
