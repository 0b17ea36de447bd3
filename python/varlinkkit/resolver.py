"""Service resolution and introspection helpers built on ``Connection``."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .errors import ProtocolError, ResolveError, TransportError
from .transport import Connection, TransportConfig

logger = logging.getLogger(__name__)

RESOLVER_ADDRESS = "unix:/run/org.varlink.resolver"
RESOLVER_INTERFACE = "org.varlink.resolver"
RESOLVER_GET_INFO = f"{RESOLVER_INTERFACE}.GetInfo"
SERVICE_GET_INFO = "org.varlink.service.GetInfo"
SERVICE_GET_INTERFACE_DESCRIPTION = "org.varlink.service.GetInterfaceDescription"


class RemoteCallError(TransportError):
    """A synchronous helper call was answered with a varlink error."""

    def __init__(self, method: str, error: str, parameters: Any = None) -> None:
        super().__init__(f"{method} failed: {error}")
        self.error = error
        self.parameters = parameters


def resolve(
    interface: str,
    *,
    resolver_address: str = RESOLVER_ADDRESS,
    config: Optional[TransportConfig] = None,
) -> str:
    """Return the address of the service implementing ``interface``."""
    if interface == RESOLVER_INTERFACE:
        return resolver_address
    try:
        with Connection.open(resolver_address, config) as connection:
            reply = connection.call_sync(f"{RESOLVER_INTERFACE}.Resolve", {"interface": interface})
    except TransportError as exc:
        raise ResolveError(f"cannot resolve {interface}: {exc}") from exc
    if reply.is_error:
        raise ResolveError(f"cannot resolve {interface}: {reply.error}")
    address = reply.parameters.get("address") if isinstance(reply.parameters, dict) else None
    if not isinstance(address, str) or not address:
        raise ResolveError(f"resolver returned no address for {interface}")
    logger.debug("resolved %s to %s", interface, address)
    return address


def _checked_call(connection: Connection, method: str, parameters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    reply = connection.call_sync(method, parameters)
    if reply.is_error:
        raise RemoteCallError(method, reply.error or "", reply.parameters)
    if not isinstance(reply.parameters, dict):
        raise ProtocolError(f"{method} returned non-object parameters")
    return reply.parameters


def get_info(connection: Connection) -> Dict[str, Any]:
    return _checked_call(connection, SERVICE_GET_INFO)


def _interface_names(parameters: Dict[str, Any]) -> List[str]:
    interfaces = parameters.get("interfaces") or []
    return [str(name) for name in interfaces if isinstance(name, str)]


def list_interfaces(connection: Connection) -> List[str]:
    """Interfaces implemented by the service behind ``connection``."""
    return _interface_names(get_info(connection))


def list_registered_interfaces(connection: Connection) -> List[str]:
    """Interfaces the resolver knows a service address for."""
    return _interface_names(_checked_call(connection, RESOLVER_GET_INFO))


def get_interface_description(connection: Connection, interface: str) -> str:
    parameters = _checked_call(connection, SERVICE_GET_INTERFACE_DESCRIPTION, {"interface": interface})
    description = parameters.get("description")
    if not isinstance(description, str):
        raise ProtocolError(f"no description returned for {interface}")
    return description


__all__ = [
    "RESOLVER_ADDRESS",
    "RESOLVER_GET_INFO",
    "RESOLVER_INTERFACE",
    "RemoteCallError",
    "SERVICE_GET_INFO",
    "SERVICE_GET_INTERFACE_DESCRIPTION",
    "get_info",
    "get_interface_description",
    "list_interfaces",
    "list_registered_interfaces",
    "resolve",
]
