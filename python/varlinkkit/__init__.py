"""
varlinkkit - protocol toolkit shared by the varlink command-line front-ends.

Each module keeps one responsibility:

    uri.py        → ``[ADDRESS/]INTERFACE[.METHOD]`` target parsing
    transport.py  → sockets, NUL framing and the reply event loop
    events.py     → typed reply events
    interface.py  → interface description parser and renderer
    resolver.py   → interface resolution and service introspection
"""

from .errors import (  # noqa: F401
    AddressError,
    ConnectError,
    ConnectionClosedError,
    ProtocolError,
    ResolveError,
    TransportError,
)
from .events import ReplyEvent, parse_reply  # noqa: F401
from .interface import Interface, InterfaceSyntaxError, format_interface, parse_interface  # noqa: F401
from .resolver import RESOLVER_ADDRESS, RemoteCallError, resolve  # noqa: F401
from .transport import Connection, TransportConfig  # noqa: F401
from .uri import QualifiedTarget, TargetError, parse_target, split_address  # noqa: F401

__all__ = [
    "AddressError",
    "ConnectError",
    "ConnectionClosedError",
    "ProtocolError",
    "ResolveError",
    "TransportError",
    "ReplyEvent",
    "parse_reply",
    "Interface",
    "InterfaceSyntaxError",
    "format_interface",
    "parse_interface",
    "RESOLVER_ADDRESS",
    "RemoteCallError",
    "resolve",
    "Connection",
    "TransportConfig",
    "QualifiedTarget",
    "TargetError",
    "parse_target",
    "split_address",
]

__version__ = "0.1.0"
