"""Jira dashboard gateway entry point.

Usage: jiradash [--config config.yaml] [--host H] [--port N] [--check]
"""

import argparse
import logging
import sys
from pathlib import Path

from jiradash.adapters.base import TrackerError
from jiradash.config import AppConfig, load_config
from jiradash.gateway.server import build_adapter, run_gateway_server
from jiradash.logging import JiradashLogging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the gateway."""
    parser = argparse.ArgumentParser(
        prog="jiradash",
        description="Jira dashboard gateway - forwards dashboard queries to Jira",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument("--host", default=None, help="Bind host (overrides gateway.host)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Bind port (overrides gateway.port)")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Load config, verify Jira credentials, then exit",
    )
    return parser.parse_args(argv)


def check_connection(config: AppConfig) -> int:
    """Verify config and, when credentials exist, call Jira's /myself."""
    print("Config OK:", config.jira.base_url, f"port {config.gateway.port}")
    if not config.has_jira_credentials:
        print("Jira credentials missing: set JIRA_EMAIL and JIRA_API_TOKEN", file=sys.stderr)
        return 1
    try:
        me = build_adapter(config).myself()
    except TrackerError as e:
        print(f"Jira connection failed ({e.status_code or 'network'}): {e.message}", file=sys.stderr)
        if e.status_code == 401:
            print("Check JIRA_EMAIL and JIRA_API_TOKEN, or generate a new API token", file=sys.stderr)
        return 1
    print(f"Connected to Jira as {me.get('displayName', '')} ({me.get('emailAddress', '')})")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point: load config and serve the gateway."""
    args = parse_args(argv)
    config_path = args.config
    if not config_path.is_file() and config_path == Path("config.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")
            logging.basicConfig(level=logging.INFO)
            logging.getLogger("jiradash").warning("config.yaml not found, using config.example.yaml")

    config = load_config(config_path)
    if args.host:
        config.gateway.host = args.host
    if args.port:
        config.gateway.port = args.port

    if args.check:
        return check_connection(config)

    JiradashLogging(config.logging).setup()
    log = logging.getLogger("jiradash.main")
    try:
        run_gateway_server(config)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
