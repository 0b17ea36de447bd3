"""Exception hierarchy shared by the varlinkkit modules."""

from __future__ import annotations


class TransportError(RuntimeError):
    """Raised when the transport cannot complete an operation."""


class AddressError(TransportError):
    """Raised for addresses with an unknown or malformed scheme."""


class ConnectError(TransportError):
    """Raised when no connection to the service could be established."""


class ProtocolError(TransportError):
    """Raised when a peer sends a message that is not a valid varlink reply."""


class ConnectionClosedError(TransportError):
    """Raised when the peer hangs up while calls are still pending."""


class ResolveError(TransportError):
    """Raised when an interface cannot be mapped to a service address."""
