"""Proxy gateway HTTP server.

Serves the health check and the /api/* routes that forward to Jira with
the server-side credential. Only GET is routed; OPTIONS answers CORS
preflight.
"""

import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict
from urllib.parse import parse_qs, urlsplit

from jiradash.adapters.base import IssueTrackerAdapter
from jiradash.adapters.jira import JiraAdapter
from jiradash.config import AppConfig
from jiradash.gateway.handlers import handle_get, not_found

LOG = logging.getLogger("jiradash.gateway")
ACCESS_LOG = logging.getLogger("jiradash.gateway.access")


class GatewayHandler(BaseHTTPRequestHandler):
    """Route GET /health and GET /api/* to the gateway handlers."""

    config: AppConfig
    adapter: IssueTrackerAdapter

    def _send_json(self, status: int, body: Dict[str, Any]) -> None:
        payload = json.dumps(body).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.send_header("Access-Control-Allow-Origin", self.config.gateway.cors_origin)
        self.end_headers()
        self.wfile.write(payload)

    def do_GET(self) -> None:
        parts = urlsplit(self.path)
        query = parse_qs(parts.query, keep_blank_values=True)
        status, body = handle_get(self.config, self.adapter, parts.path, query)
        self._send_json(status, body)

    def do_OPTIONS(self) -> None:
        self.send_response(204)
        self.send_header("Access-Control-Allow-Origin", self.config.gateway.cors_origin)
        self.send_header("Access-Control-Allow-Methods", "GET, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def _not_routed(self) -> None:
        # Drain the request body so the client sees the response, not a reset
        length = int(self.headers.get("Content-Length") or 0)
        if length:
            self.rfile.read(length)
        status, body = not_found(self.path)
        self._send_json(status, body)

    do_POST = _not_routed
    do_PUT = _not_routed
    do_PATCH = _not_routed
    do_DELETE = _not_routed

    def log_message(self, format: str, *args: Any) -> None:
        ACCESS_LOG.info("%s - " + format, self.address_string(), *args)


def build_adapter(config: AppConfig) -> JiraAdapter:
    """Jira adapter from config; missing credentials fail on first call."""
    return JiraAdapter(
        base_url=config.jira.base_url,
        email=config.jira_email_resolved,
        api_token=config.jira_api_token_resolved,
        timeout=config.jira.timeout,
    )


def make_server(config: AppConfig, adapter: IssueTrackerAdapter | None = None) -> ThreadingHTTPServer:
    """Bind the gateway server without starting it."""
    handler = type(
        "BoundGatewayHandler",
        (GatewayHandler,),
        {"config": config, "adapter": adapter or build_adapter(config)},
    )
    return ThreadingHTTPServer((config.gateway.host, config.gateway.port), handler)


def run_gateway_server(config: AppConfig) -> None:
    """Run the gateway until interrupted."""
    server = make_server(config)
    host, port = server.server_address[:2]
    LOG.info("Jira gateway listening on http://%s:%s", host, port)
    LOG.info("Health check: http://%s:%s/health", host, port)
    if not config.has_jira_credentials:
        LOG.warning(
            "Jira credentials not configured. Set JIRA_EMAIL and JIRA_API_TOKEN; "
            "tracker requests will fail until then"
        )
    try:
        server.serve_forever()
    finally:
        server.server_close()
