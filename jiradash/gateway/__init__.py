"""Proxy gateway: HTTP server and route handlers."""

from jiradash.gateway.handlers import handle_get
from jiradash.gateway.server import make_server, run_gateway_server

__all__ = ["handle_get", "make_server", "run_gateway_server"]
