"""
Transport layer for varlinkkit.

Responsibilities:
    * Open unix or tcp stream connections to varlink services.
    * Frame calls and replies as NUL-terminated JSON objects.
    * Run the single-threaded event loop that feeds inbound replies to the
      handler registered for the oldest pending call.
"""

from __future__ import annotations

import json
import logging
import socket
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from .errors import AddressError, ConnectError, ConnectionClosedError, ProtocolError, TransportError
from .events import ReplyEvent, ReplyHandler, build_call, parse_reply

logger = logging.getLogger(__name__)


@dataclass
class TransportConfig:
    connect_timeout: Optional[float] = 5.0
    read_timeout: Optional[float] = None
    chunk_size: int = 8192


@dataclass
class _PendingCall:
    method: str
    more: bool
    handler: ReplyHandler


def parse_address(address: str) -> Tuple[int, Any]:
    """Map a varlink address onto a socket family and ``connect()`` argument."""
    scheme, sep, rest = address.partition(":")
    if not sep or not rest:
        raise AddressError(f"invalid address {address!r}")
    rest = rest.split(";", 1)[0]
    if scheme == "unix":
        if rest.startswith("@"):
            return socket.AF_UNIX, "\0" + rest[1:]
        return socket.AF_UNIX, rest
    if scheme == "tcp":
        host, sep, port = rest.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise AddressError(f"invalid tcp address {address!r}")
        if host.startswith("[") and host.endswith("]"):
            return socket.AF_INET6, (host[1:-1], int(port))
        return socket.AF_INET, (host, int(port))
    raise AddressError(f"unsupported address scheme {scheme!r}")


class Connection:
    """One varlink connection plus the queue of calls waiting for replies."""

    def __init__(self, sock: socket.socket, address: str = "", config: Optional[TransportConfig] = None) -> None:
        self.address = address
        self.config = config or TransportConfig()
        self._sock: Optional[socket.socket] = sock
        self._buffer = b""
        self._pending: Deque[_PendingCall] = deque()

    @classmethod
    def open(cls, address: str, config: Optional[TransportConfig] = None) -> "Connection":
        config = config or TransportConfig()
        family, target = parse_address(address)
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.settimeout(config.connect_timeout)
            sock.connect(target)
            sock.settimeout(config.read_timeout)
        except OSError as exc:
            sock.close()
            raise ConnectError(f"connect to {address} failed: {exc}") from exc
        logger.debug("connected to %s", address)
        return cls(sock, address, config)

    #
    # Lifecycle
    #
    @property
    def closed(self) -> bool:
        return self._sock is None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def close(self) -> None:
        """Close the socket; later calls are no-ops."""
        sock = self._sock
        if sock is None:
            return
        self._sock = None
        self._pending.clear()
        try:
            sock.close()
        except OSError:
            pass
        logger.debug("closed connection to %s", self.address or "<socket>")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    #
    # Calls
    #
    def call(
        self,
        method: str,
        parameters: Optional[Dict[str, Any]] = None,
        *,
        more: bool = False,
        handler: ReplyHandler,
    ) -> None:
        """Submit one call; ``handler`` receives its replies from ``process_events``."""
        if self._sock is None:
            raise TransportError("connection closed")
        data = json.dumps(build_call(method, parameters, more=more)).encode("utf-8") + b"\0"
        try:
            self._sock.sendall(data)
        except OSError as exc:
            raise TransportError(f"send {method} failed: {exc}") from exc
        self._pending.append(_PendingCall(method, more, handler))
        logger.debug("call %s more=%s", method, more)

    def call_sync(self, method: str, parameters: Optional[Dict[str, Any]] = None) -> ReplyEvent:
        """Submit a call and wait for its single reply."""
        replies: List[ReplyEvent] = []
        self.call(method, parameters, handler=replies.append)
        self.process_events(until=lambda: bool(replies))
        if not replies:
            raise ConnectionClosedError(f"no reply to {method}")
        return replies[0]

    #
    # Event loop
    #
    def process_events(self, *, until: Optional[Callable[[], bool]] = None) -> None:
        """Dispatch inbound replies until the connection is closed locally.

        Returns early once ``until`` holds. Raises ``ConnectionClosedError``
        when the peer hangs up with calls still pending.
        """
        while self._sock is not None:
            if until is not None and until():
                return
            message = self._read_message()
            if message is None:
                pending = len(self._pending)
                self.close()
                if pending:
                    raise ConnectionClosedError(f"connection closed by {self.address or 'peer'}")
                return
            self._dispatch(message)

    def _read_message(self) -> Optional[Any]:
        while b"\0" not in self._buffer:
            sock = self._sock
            if sock is None:
                return None
            try:
                chunk = sock.recv(self.config.chunk_size)
            except socket.timeout as exc:
                raise TransportError("read timeout") from exc
            except OSError as exc:
                raise TransportError(f"read failed: {exc}") from exc
            if not chunk:
                return None
            self._buffer += chunk
        line, self._buffer = self._buffer.split(b"\0", 1)
        try:
            return json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ProtocolError(f"malformed message: {exc}") from exc

    def _dispatch(self, message: Any) -> None:
        reply = parse_reply(message)
        if not self._pending:
            raise ProtocolError("reply without pending call")
        call = self._pending[0]
        if reply.is_error or not reply.continues or not call.more:
            self._pending.popleft()
        logger.debug("reply for %s error=%s continues=%s", call.method, reply.error, reply.continues)
        call.handler(reply)


__all__ = ["Connection", "TransportConfig", "parse_address"]
