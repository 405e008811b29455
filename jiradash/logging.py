"""Logging from config and env.

Levels (inclusive):
- ERROR: failed upstream calls and unhandled gateway errors
- WARNING: malformed tracker payloads, discarded stale responses
- INFO: forwarded queries, server start
- DEBUG: everything above plus urllib3 connection chatter

Gateway access lines go to ``jiradash.gateway.access`` at INFO and are
shown only when ``logging.access_log`` is on.

Configure via config.yaml (logging.level, logging.format,
logging.access_log) or env (LOGGING_LEVEL, LOGGING_FORMAT,
LOGGING_ACCESS_LOG).
"""

import logging

from jiradash.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ACCESS_LOGGER = "jiradash.gateway.access"
# Third-party loggers that only matter when debugging upstream traffic
UPSTREAM_LOGGERS = ("urllib3",)


def _resolve_level(level: str) -> int:
    """Map level name to logging constant.

    Falls back to INFO if unknown.
    """
    return LEVELS.get(level.upper().strip(), logging.INFO)


class JiradashLogging:
    """Configures root, access and upstream loggers from LoggingConfig."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT
        self._access_log = config.access_log

    def setup(self) -> None:
        """Apply level and format to the root logger and tune the gateway
        access log and upstream HTTP loggers."""
        logging.basicConfig(
            level=self._level,
            format=self._format,
            force=True,
        )
        access_level = logging.INFO if self._access_log else logging.WARNING
        logging.getLogger(ACCESS_LOGGER).setLevel(access_level)
        upstream_level = logging.DEBUG if self._level == logging.DEBUG else logging.WARNING
        for name in UPSTREAM_LOGGERS:
            logging.getLogger(name).setLevel(upstream_level)
