"""Command registry for varlink-cli."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .base import Command
from .call import CallCommand
from .complete import CompleteCommand
from .exit import ExitCommand
from .help import HelpCommand
from .info import InfoCommand
from .resolve import ResolveCommand
from .shell import ShellCommand


class CommandRegistry:
    """Stores the known commands and resolves aliases."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}
        self._ordered: List[Command] = []

    def register(self, command: Command) -> None:
        self._ordered.append(command)
        self._commands[command.name] = command
        for alias in command.aliases:
            self._commands[alias] = command

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def list_commands(self) -> Iterable[Command]:
        return [command for command in self._ordered if not command.hidden]

    def names(self) -> List[str]:
        return sorted(command.name for command in self.list_commands())


def build_registry() -> CommandRegistry:
    registry = CommandRegistry()
    commands = [
        CallCommand(),
        HelpCommand(),
        InfoCommand(),
        ResolveCommand(),
        ShellCommand(),
        CompleteCommand(),
        ExitCommand(),
    ]
    for command in commands:
        registry.register(command)
        bind = getattr(command, "bind", None)
        if callable(bind):
            bind(registry)
    return registry


__all__ = ["Command", "CommandRegistry", "build_registry"]
