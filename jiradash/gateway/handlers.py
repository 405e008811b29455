"""Gateway routes: forward dashboard queries to Jira and shape errors.

Each handler returns ``(status, body)``. Tracker failures become the
``{error, message, details}`` envelope with the upstream status (500 when
there was no response or credentials are missing).
"""

import logging
import re
from datetime import UTC, datetime
from typing import Any, Callable, Dict, List, Tuple

from jiradash import __version__
from jiradash.adapters.base import IssueTrackerAdapter, TrackerError
from jiradash.config import AppConfig
from jiradash.normalizer import SPRINT_FIELD_SLOTS
from jiradash.sprints import filter_sprint_payloads

LOG = logging.getLogger("jiradash.gateway.handlers")

Query = Dict[str, List[str]]
Response = Tuple[int, Dict[str, Any]]

ISSUE_FIELDS = [
    "summary",
    "status",
    "priority",
    "assignee",
    "reporter",
    "created",
    "updated",
    "labels",
    "issuetype",
    "description",
    *SPRINT_FIELD_SLOTS,
]
SPRINT_FIELD_SCHEMA = "com.pyxis.greenhopper.jira:gh-sprint"
SPRINT_LIST_MAX_RESULTS = 1000


class BadRequest(Exception):
    """Client sent an unusable parameter."""

    def __init__(self, error: str, message: str) -> None:
        super().__init__(message)
        self.error = error
        self.message = message


def _first(query: Query, name: str) -> str | None:
    values = query.get(name) or []
    value = values[0].strip() if values else ""
    return value or None


def error_envelope(error: str, exc: TrackerError) -> Response:
    return (
        exc.status_code or 500,
        {"error": error, "message": exc.message, "details": exc.details},
    )


def not_found(path: str) -> Response:
    return 404, {"error": "Not found", "message": f"Route {path} not found"}


def health(config: AppConfig, adapter: IssueTrackerAdapter, query: Query) -> Response:
    return 200, {
        "status": "OK",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": __version__,
    }


def jira_issues(config: AppConfig, adapter: IssueTrackerAdapter, query: Query) -> Response:
    jql = _first(query, "jql") or config.jira.default_jql
    LOG.info("Fetching issues with JQL: %s", jql)
    return 200, adapter.search_issues(jql, ISSUE_FIELDS, config.jira.max_results)


def _is_sprint_field(field: Any) -> bool:
    if not isinstance(field, dict):
        return False
    name = field.get("name") or ""
    field_id = field.get("id") or ""
    schema = field.get("schema") or {}
    return (
        "sprint" in str(name).lower()
        or "sprint" in str(field_id)
        or (isinstance(schema, dict) and schema.get("customId") == SPRINT_FIELD_SCHEMA)
    )


def jira_fields(config: AppConfig, adapter: IssueTrackerAdapter, query: Query) -> Response:
    LOG.info("Fetching Jira field information")
    fields = adapter.list_fields()
    return 200, {
        "sprintFields": [f for f in fields if _is_sprint_field(f)],
        "allFieldsCount": len(fields),
    }


def jira_sprints(config: AppConfig, adapter: IssueTrackerAdapter, query: Query) -> Response:
    board_id = _first(query, "boardId")
    if not board_id:
        raise BadRequest("Board ID is required", "Please provide a boardId parameter")
    sprint_name = _first(query, "sprintName")
    LOG.info(
        "Fetching sprints for board %s%s",
        board_id,
        f" with name filter: {sprint_name}" if sprint_name else "",
    )
    data = adapter.list_board_sprints(board_id, max_results=SPRINT_LIST_MAX_RESULTS)
    if not isinstance(data, dict):
        data = {}
    values = data.get("values") if isinstance(data.get("values"), list) else []
    return 200, {**data, "values": filter_sprint_payloads(values, sprint_name)}


def sprint_detail(config: AppConfig, adapter: IssueTrackerAdapter, query: Query, sprint_id: str) -> Response:
    LOG.info("Fetching sprint details for sprint %s", sprint_id)
    return 200, adapter.get_sprint(sprint_id)


def jira_boards(config: AppConfig, adapter: IssueTrackerAdapter, query: Query) -> Response:
    board_type = _first(query, "type")
    raw_max = _first(query, "maxResults")
    max_results = None
    if raw_max is not None:
        if not raw_max.isdigit():
            raise BadRequest("Invalid maxResults", "maxResults must be a positive integer")
        max_results = int(raw_max)
    LOG.info("Fetching boards (type=%s, maxResults=%s)", board_type, max_results)
    return 200, adapter.list_boards(board_type=board_type, max_results=max_results)


# (pattern, handler, error code used when the tracker call fails)
ROUTES: List[Tuple[re.Pattern[str], Callable[..., Response], str]] = [
    (re.compile(r"^/health/?$"), health, "Health check failed"),
    (re.compile(r"^/api/jira-issues/?$"), jira_issues, "Failed to fetch issues"),
    (re.compile(r"^/api/jira-fields/?$"), jira_fields, "Failed to fetch fields"),
    (re.compile(r"^/api/jira-sprints/?$"), jira_sprints, "Failed to fetch sprints"),
    (re.compile(r"^/api/sprint/(?P<sprint_id>[^/]+)/?$"), sprint_detail, "Failed to fetch sprint details"),
    (re.compile(r"^/api/jira-boards/?$"), jira_boards, "Failed to fetch boards"),
]


def handle_get(config: AppConfig, adapter: IssueTrackerAdapter, path: str, query: Query) -> Response:
    """Dispatch a GET request to its route and map failures to envelopes."""
    for pattern, handler, error in ROUTES:
        match = pattern.match(path)
        if match is None:
            continue
        try:
            return handler(config, adapter, query, **match.groupdict())
        except BadRequest as e:
            return 400, {"error": e.error, "message": e.message}
        except TrackerError as e:
            LOG.error("%s: %s", error, e.message)
            return error_envelope(error, e)
        except Exception as e:
            LOG.exception("Unhandled error on %s", path)
            return 500, {"error": "Internal server error", "message": str(e)}
    return not_found(path)
