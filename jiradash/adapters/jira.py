"""Jira Cloud REST adapter (platform API v3 and Agile API 1.0)."""

import logging
from typing import Any, Dict, List

import requests

from jiradash.adapters.base import IssueTrackerAdapter, TrackerConfigError, TrackerError

LOG = logging.getLogger("jiradash.adapters.jira")

MISSING_CREDENTIALS_MESSAGE = (
    "Jira credentials not configured. Please set JIRA_EMAIL and JIRA_API_TOKEN "
    "(environment, JIRA_API_TOKEN_FILE or config.yaml)"
)


def _error_message(status_code: int, payload: Any) -> str:
    """First human-readable message of a Jira error response."""
    if isinstance(payload, dict):
        messages = payload.get("errorMessages")
        if isinstance(messages, list) and messages and isinstance(messages[0], str):
            return messages[0]
        errors = payload.get("errors")
        if isinstance(errors, dict):
            for value in errors.values():
                if isinstance(value, str) and value:
                    return value
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message
    return f"Request failed with status code {status_code}"


class JiraAdapter(IssueTrackerAdapter):
    """Jira API implementation with email + API token basic auth."""

    def __init__(
        self,
        base_url: str,
        email: str | None,
        api_token: str | None,
        timeout: int = 30,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._email = email
        self._api_token = api_token
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["Accept"] = "application/json"
        self._session.headers["Content-Type"] = "application/json"

    @property
    def base_url(self) -> str:
        return self._base_url

    def _auth(self) -> tuple[str, str]:
        if not self._email or not self._api_token:
            raise TrackerConfigError(MISSING_CREDENTIALS_MESSAGE)
        return self._email, self._api_token

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
    ) -> Any:
        auth = self._auth()
        url = f"{self._base_url}{path}" if path.startswith("/") else f"{self._base_url}/{path}"
        try:
            resp = self._session.request(method, url, params=params, auth=auth, timeout=self._timeout)
        except requests.RequestException as e:
            LOG.error("Jira request %s %s failed: %s", method, path, e)
            raise TrackerError(str(e) or "Network error") from e
        if resp.status_code >= 400:
            try:
                details = resp.json()
            except ValueError:
                details = resp.text or None
            message = _error_message(resp.status_code, details)
            LOG.error("Jira %s %s returned %s: %s", method, path, resp.status_code, message)
            raise TrackerError(message, status_code=resp.status_code, details=details)
        try:
            return resp.json()
        except ValueError as e:
            raise TrackerError(f"Invalid JSON from Jira: {e}", details=resp.text) from e

    def search_issues(self, jql: str, fields: List[str], max_results: int) -> Dict[str, Any]:
        return self._request(
            "GET",
            "/rest/api/3/search",
            params={
                "jql": jql,
                "fields": ",".join(fields),
                "maxResults": max_results,
                "expand": "names",
            },
        )

    def list_fields(self) -> List[Dict[str, Any]]:
        data = self._request("GET", "/rest/api/3/field")
        return data if isinstance(data, list) else []

    def list_board_sprints(self, board_id: str, max_results: int = 1000) -> Dict[str, Any]:
        return self._request(
            "GET",
            f"/rest/agile/1.0/board/{board_id}/sprint",
            params={"maxResults": max_results},
        )

    def get_sprint(self, sprint_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/rest/agile/1.0/sprint/{sprint_id}")

    def list_boards(self, board_type: str | None = None, max_results: int | None = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if board_type:
            params["type"] = board_type
        if max_results is not None:
            params["maxResults"] = max_results
        return self._request("GET", "/rest/agile/1.0/board", params=params or None)

    def myself(self) -> Dict[str, Any]:
        return self._request("GET", "/rest/api/3/myself")
