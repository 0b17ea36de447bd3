"""Shared command-line state and connection helpers."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, TextIO

from varlinkkit import resolver
from varlinkkit.errors import ConnectionClosedError, ResolveError, TransportError
from varlinkkit.interface import parse_interface
from varlinkkit.transport import Connection, TransportConfig

from .errors import CliError, CliFailure

LOGGER = logging.getLogger("varlink_cli.context")


def _default_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


@dataclass
class CliContext:
    """Holds per-invocation CLI configuration."""

    resolver_address: str = field(default_factory=lambda: os.environ.get("VARLINK_RESOLVER", resolver.RESOLVER_ADDRESS))
    timeout: Optional[float] = None
    color: bool = field(default_factory=_default_color)
    history_path: Path = field(default_factory=lambda: Path.home() / ".varlink-cli-history")
    stdin: TextIO = field(default_factory=lambda: sys.stdin)
    _interfaces: Dict[str, List[str]] = field(default_factory=dict, init=False, repr=False)

    @property
    def transport_config(self) -> TransportConfig:
        if self.timeout is None:
            return TransportConfig()
        return TransportConfig(connect_timeout=self.timeout, read_timeout=self.timeout)

    def resolve(self, interface: str) -> str:
        try:
            return resolver.resolve(
                interface,
                resolver_address=self.resolver_address,
                config=self.transport_config,
            )
        except ResolveError as exc:
            raise CliFailure(CliError.CANNOT_RESOLVE, str(exc)) from exc

    def connect(self, address: Optional[str], interface: Optional[str] = None) -> Connection:
        """Open a connection to ``address``, resolving ``interface`` when it is absent."""
        if not address:
            if not interface:
                raise CliFailure(CliError.MISSING_ARGUMENT, "no address or interface to connect to")
            address = self.resolve(interface)
        LOGGER.debug("connecting to %s", address)
        try:
            return Connection.open(address, self.transport_config)
        except TransportError as exc:
            raise CliFailure(CliError.CANNOT_CONNECT, str(exc)) from exc

    def process_all_events(self, connection: Connection) -> None:
        """Run the event loop for ``connection`` until it is closed.

        Ctrl-C surfaces as CANCELED; the connection is closed on every path.
        """
        try:
            connection.process_events()
        except KeyboardInterrupt as exc:
            raise CliFailure(CliError.CANCELED, "canceled") from exc
        except ConnectionClosedError as exc:
            raise CliFailure(CliError.CONNECTION_CLOSED, str(exc)) from exc
        except TransportError as exc:
            raise CliFailure(CliError.CALL_FAILED, str(exc)) from exc
        finally:
            connection.close()

    #
    # Method catalog used by completion
    #
    def list_interfaces(self, address: Optional[str] = None) -> List[str]:
        """Interfaces served at ``address``, or registered with the resolver when it is absent."""
        key = address or self.resolver_address
        cached = self._interfaces.get(key)
        if cached is not None:
            return list(cached)
        with Connection.open(key, self.transport_config) as connection:
            if address:
                names = sorted(resolver.list_interfaces(connection))
            else:
                names = sorted(resolver.list_registered_interfaces(connection))
        self._interfaces[key] = names
        return list(names)

    def list_methods(self, interface: str, address: Optional[str] = None) -> List[str]:
        connection = self.connect(address, interface)
        with connection:
            description = resolver.get_interface_description(connection, interface)
        return parse_interface(description).method_names()


__all__ = ["CliContext"]
