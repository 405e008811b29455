"""Dashboard-side client for the proxy gateway.

Calls the gateway's /api routes and returns normalized models.
"""

import logging
from typing import Any, Dict, List

import requests

from jiradash.models import Board, Issue, Sprint
from jiradash.normalizer import boards_from_payload, issues_from_search, sprint_from_api, sprints_from_payload

LOG = logging.getLogger("jiradash.client")


class GatewayError(Exception):
    """Raised when a gateway call fails (transport or error status)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GatewayClient:
    """HTTP client for the gateway API (e.g. http://localhost:3000/api)."""

    def __init__(self, api_url: str, timeout: int = 60) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["Accept"] = "application/json"

    def _get(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        url = f"{self._api_url}/{path.lstrip('/')}"
        try:
            resp = self._session.request("GET", url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise GatewayError(f"Gateway unreachable: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except (ValueError, AttributeError):
                pass
            raise GatewayError(f"{resp.status_code}: {msg}", status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise GatewayError(f"Invalid JSON from gateway: {e}") from e

    def search_issues(self, jql: str | None = None) -> List[Issue]:
        params = {"jql": jql} if jql else None
        return issues_from_search(self._get("/jira-issues", params=params))

    def search_sprints(self, board_id: int | str, sprint_name: str | None = None) -> List[Sprint]:
        params: Dict[str, Any] = {"boardId": board_id}
        if sprint_name and sprint_name.strip():
            params["sprintName"] = sprint_name.strip()
        data = self._get("/jira-sprints", params=params)
        board = int(board_id) if str(board_id).isdigit() else None
        return sprints_from_payload(data, board_id=board)

    def get_sprint(self, sprint_id: int | str) -> Sprint | None:
        return sprint_from_api(self._get(f"/sprint/{sprint_id}"))

    def list_boards(self, board_type: str | None = None, max_results: int | None = None) -> List[Board]:
        params: Dict[str, Any] = {}
        if board_type:
            params["type"] = board_type
        if max_results is not None:
            params["maxResults"] = max_results
        return boards_from_payload(self._get("/jira-boards", params=params or None))

    def sprint_fields(self) -> List[Dict[str, Any]]:
        """Sprint-like field definitions (diagnostics)."""
        data = self._get("/jira-fields")
        fields = data.get("sprintFields") if isinstance(data, dict) else None
        return fields if isinstance(fields, list) else []
