"""Map raw Jira REST payloads to canonical models.

Every function here is total: malformed or missing nested data degrades
to safe defaults and is logged, never raised.
"""

import logging
from typing import Any, Dict, List

from jiradash.models import Board, BoardLocation, Issue, Person, Sprint, SprintRef

LOG = logging.getLogger("jiradash.normalizer")

# Canonical field first, then custom-field slots seen on different Jira sites
SPRINT_FIELD_SLOTS = ("sprint", "customfield_10020", "customfield_10010", "customfield_10014")
ADF_BLOCK_TYPES = ("paragraph", "heading", "listItem", "codeBlock", "blockquote")


def _str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _name_of(value: Any) -> str:
    """Return ``value["name"]`` for Jira's ``{name: ...}`` objects."""
    if isinstance(value, dict):
        return _str(value.get("name"))
    return ""


def _person(value: Any) -> Person | None:
    if not isinstance(value, dict):
        return None
    return Person(
        display_name=_str(value.get("displayName")),
        email_address=_str(value.get("emailAddress")),
    )


def _adf_text(node: Any) -> str:
    """Flatten an Atlassian Document Format node to plain text.

    Walks the tree with an explicit stack; nesting depth is unbounded.
    """
    parts: List[str] = []
    stack: List[Any] = [node]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, list):
            stack.extend(reversed(item))
        elif isinstance(item, dict):
            if item.get("type") == "text":
                parts.append(_str(item.get("text")))
                continue
            if item.get("type") in ADF_BLOCK_TYPES:
                stack.append("\n")
            stack.append(item.get("content") or [])
    return "".join(parts)


def _description(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return _adf_text(value).strip()
    return ""


def _is_non_empty(value: Any) -> bool:
    if value is None or value == "":
        return False
    if isinstance(value, (list, dict)) and not value:
        return False
    return True


def _looks_like_sprint_list(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and isinstance(value[0], dict)
        and "name" in value[0]
        and "id" in value[0]
    )


def _find_sprint_value(fields: Dict[str, Any]) -> Any:
    """Locate the raw sprint value: known slots first, then a shape scan."""
    for slot in SPRINT_FIELD_SLOTS:
        value = fields.get(slot)
        if _is_non_empty(value):
            return value
    for name, value in fields.items():
        if _looks_like_sprint_list(value):
            LOG.debug("Sprint data found in unlisted field %s", name)
            return value
    return None


def _pick_sprint(value: Any) -> Dict[str, Any] | None:
    """Active sprint wins; otherwise the most recent (last) membership."""
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        candidates = [v for v in value if isinstance(v, dict)]
        if not candidates:
            return None
        for sprint in candidates:
            if sprint.get("state") == "active":
                return sprint
        return candidates[-1]
    return None


def resolve_sprint(fields: Dict[str, Any]) -> SprintRef | None:
    """Resolve which sprint an issue belongs to, or None."""
    picked = _pick_sprint(_find_sprint_value(fields))
    if picked is None:
        return None
    sprint_id = picked.get("id")
    if not isinstance(sprint_id, (int, str)) or isinstance(sprint_id, bool):
        LOG.warning("Ignoring sprint without usable id: %r", picked)
        return None
    state = picked.get("state")
    return SprintRef(
        id=sprint_id,
        name=_str(picked.get("name")),
        state=state if isinstance(state, str) else None,
    )


def issue_from_api(raw: Any) -> Issue:
    """Build a canonical Issue from one ``/rest/api/3/search`` entry."""
    if not isinstance(raw, dict):
        LOG.warning("Skipping malformed issue payload of type %s", type(raw).__name__)
        return Issue()
    fields = raw.get("fields")
    if not isinstance(fields, dict):
        fields = {}
    labels_raw = fields.get("labels")
    labels = [lb for lb in labels_raw if isinstance(lb, str)] if isinstance(labels_raw, list) else []
    try:
        sprint = resolve_sprint(fields)
    except Exception as e:
        LOG.warning("Failed to resolve sprint for %s: %s", raw.get("key"), e)
        sprint = None
    return Issue(
        id=_str(raw.get("id")),
        key=_str(raw.get("key")),
        summary=_str(fields.get("summary")),
        description=_description(fields.get("description")),
        status=_name_of(fields.get("status")),
        priority=_name_of(fields.get("priority")),
        issue_type=_name_of(fields.get("issuetype")),
        assignee=_person(fields.get("assignee")),
        reporter=_person(fields.get("reporter")) or Person(),
        created=_str(fields.get("created")),
        updated=_str(fields.get("updated")),
        labels=labels,
        sprint=sprint,
    )


def issues_from_search(payload: Any) -> List[Issue]:
    """Normalize every issue of a search response."""
    if not isinstance(payload, dict):
        return []
    raw_issues = payload.get("issues")
    if not isinstance(raw_issues, list):
        return []
    return [issue_from_api(item) for item in raw_issues]


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _opt_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def sprint_from_api(raw: Any, board_id: int | None = None) -> Sprint | None:
    """Build a Sprint from an agile API record; None if it has no id."""
    if not isinstance(raw, dict) or _opt_int(raw.get("id")) is None:
        LOG.warning("Skipping sprint record without id: %r", raw)
        return None
    return Sprint(
        id=_opt_int(raw.get("id")),
        name=_str(raw.get("name")),
        state=_str(raw.get("state")),
        board_id=board_id if board_id is not None else _opt_int(raw.get("originBoardId")),
        start_date=_opt_str(raw.get("startDate")),
        end_date=_opt_str(raw.get("endDate")),
        complete_date=_opt_str(raw.get("completeDate")),
        goal=_opt_str(raw.get("goal")),
    )


def board_from_api(raw: Any) -> Board | None:
    """Build a Board from an agile API record; None if it has no id."""
    if not isinstance(raw, dict) or _opt_int(raw.get("id")) is None:
        LOG.warning("Skipping board record without id: %r", raw)
        return None
    location = raw.get("location")
    return Board(
        id=_opt_int(raw.get("id")),
        name=_str(raw.get("name")),
        type=_str(raw.get("type")),
        location=(
            BoardLocation(
                project_id=_opt_int(location.get("projectId")),
                project_key=_opt_str(location.get("projectKey")),
                project_name=_opt_str(location.get("projectName")),
            )
            if isinstance(location, dict)
            else None
        ),
    )


def _values(payload: Any) -> list:
    if isinstance(payload, dict) and isinstance(payload.get("values"), list):
        return payload["values"]
    return []


def sprints_from_payload(payload: Any, board_id: int | None = None) -> List[Sprint]:
    """Normalize the ``values`` of a board-sprints response."""
    sprints = (sprint_from_api(v, board_id) for v in _values(payload))
    return [s for s in sprints if s is not None]


def boards_from_payload(payload: Any) -> List[Board]:
    """Normalize the ``values`` of a board listing."""
    boards = (board_from_api(v) for v in _values(payload))
    return [b for b in boards if b is not None]
