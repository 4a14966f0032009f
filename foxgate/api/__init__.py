"""HTTP transport for the gateway."""

from foxgate.api.server import GatewayHTTPServer

__all__ = ["GatewayHTTPServer"]
