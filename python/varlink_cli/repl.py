"""Interactive shell for varlink-cli."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, History, InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from .completion import CliCompleter
from .context import CliContext
from .parser import split_command

if TYPE_CHECKING:  # pragma: no cover
    from .commands import CommandRegistry

LOGGER = logging.getLogger("varlink_cli.repl")

PROMPT = "varlink> "


class CliREPL:
    """prompt_toolkit loop that dispatches each line to a registered command."""

    def __init__(self, ctx: CliContext, registry: "CommandRegistry", *, history: Optional[History] = None) -> None:
        self.ctx = ctx
        self.registry = registry
        self.history = history if history is not None else self._open_history()
        self.last_status = 0

    def _open_history(self) -> History:
        path = self.ctx.history_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch(exist_ok=True)
        except OSError as exc:
            LOGGER.debug("history file %s unavailable: %s", path, exc)
            return InMemoryHistory()
        return FileHistory(str(path))

    def run(self) -> int:
        session: PromptSession[str] = PromptSession(
            PROMPT,
            history=self.history,
            completer=CliCompleter(self.ctx, self.registry),
            complete_while_typing=False,
        )
        while True:
            try:
                with patch_stdout():
                    line = session.prompt()
            except KeyboardInterrupt:
                continue
            except EOFError:
                print()
                return 0
            try:
                self.dispatch(line)
            except SystemExit as exc:
                return int(exc.code or 0)

    def dispatch(self, line: str) -> int:
        argv = split_command(line.strip())
        if not argv:
            return self.last_status
        cmd_name, *cmd_args = argv
        if len(argv) == 2 and argv[1].startswith("#parse-error"):
            print(f"Parse error: {argv[1].split(':', 1)[-1]}")
            self.last_status = 1
            return self.last_status
        if cmd_name == "shell":
            print("Already in the shell")
            return self.last_status
        command = self.registry.get(cmd_name)
        if not command:
            print(f"Unknown command: {cmd_name}")
            self.last_status = 1
            return self.last_status
        try:
            self.last_status = command.run(self.ctx, cmd_args)
        except KeyboardInterrupt:
            self.last_status = 0
        return self.last_status


__all__ = ["CliREPL", "PROMPT"]
