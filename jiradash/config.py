"""Configuration loading from YAML and environment.

Secrets (the Jira API token) are taken from environment variables or
from files (Docker secrets). Never put real tokens in config files
committed to the repo.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JQL = "project = POSC AND Sprint = 5526 ORDER BY created DESC"


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so properties can read env/file
_current_env: dict[str, str] = {}


def _is_placeholder(value: str | None) -> bool:
    return not value or value.startswith("${") or value.startswith("your-")


class JiraConfig(BaseSettings):
    """Jira site, credentials and default queries."""

    model_config = SettingsConfigDict(env_prefix="JIRA_", extra="ignore")

    base_url: str = Field(
        default="https://your-domain.atlassian.net",
        description="Jira site URL (browse links and REST calls)",
    )
    email: str | None = Field(default=None, description="Account email for basic auth")
    api_token: str | None = Field(default=None, description="API token; use env or secret file")
    default_jql: str = Field(default=DEFAULT_JQL, description="JQL used when the client sends none")
    max_results: int = Field(default=1000, ge=1, le=5000, description="Cap on issues per search")
    default_board_id: int = Field(default=506, ge=1, description="Board preselected in sprint search")
    timeout: int = Field(default=30, ge=1, description="Upstream request timeout in seconds")


class GatewayConfig(BaseSettings):
    """Proxy gateway HTTP server settings."""

    model_config = SettingsConfigDict(env_prefix="GATEWAY_", extra="ignore")

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, ge=1, le=65535, description="Bind port")
    cors_origin: str = Field(default="*", description="Access-Control-Allow-Origin value")


class DashboardConfig(BaseSettings):
    """Dashboard client settings (how the UI reaches the gateway)."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_", extra="ignore")

    api_url: str = Field(default="http://localhost:3000/api", description="Gateway API base URL")
    timeout: int = Field(default=60, ge=1, description="Request timeout in seconds")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    access_log: bool = Field(default=False, description="Log every gateway request line")


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    jira: JiraConfig = Field(default_factory=JiraConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def jira_api_token_resolved(self) -> str | None:
        """Resolve Jira API token from config, env or Docker secret file."""
        t = self.jira.api_token
        if not _is_placeholder(t):
            return t
        return _read_secret("JIRA_API_TOKEN", "JIRA_API_TOKEN_FILE")

    @property
    def jira_email_resolved(self) -> str | None:
        e = self.jira.email
        if not _is_placeholder(e):
            return e
        return _read_secret("JIRA_EMAIL", "JIRA_EMAIL_FILE")

    @property
    def has_jira_credentials(self) -> bool:
        return bool(self.jira_email_resolved and self.jira_api_token_resolved)


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        # Simple $VAR
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Secrets: JIRA_API_TOKEN or JIRA_API_TOKEN_FILE, JIRA_EMAIL.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    jira = JiraConfig(**(raw.get("jira") or {}))
    gateway = GatewayConfig(**(raw.get("gateway") or {}))
    dashboard = DashboardConfig(**(raw.get("dashboard") or {}))
    logging = LoggingConfig(**(raw.get("logging") or {}))

    return AppConfig(
        jira=jira,
        gateway=gateway,
        dashboard=dashboard,
        logging=logging,
    )
