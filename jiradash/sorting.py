"""Single-column issue sorting with status and priority rank tables."""

import re
from datetime import UTC, datetime
from typing import Any, Callable, Dict, Iterable, List, Literal, TypeVar

from pydantic import BaseModel

from jiradash.models import Issue

STATUS_RANK: Dict[str, int] = {
    "Resolved": 1,
    "Regression Testing": 2,
    "Test Done": 3,
    "Testing": 4,
    "Ready to Test": 5,
    "Review Done": 6,
    "In Review": 7,
    "In Progress": 8,
    "To Do": 9,
    "Open": 10,
    "Cancelled": 11,
}

PRIORITY_RANK: Dict[str, int] = {
    "Highest": 1,
    "High": 2,
    "Medium": 3,
    "Low": 4,
    "Lowest": 5,
}

UNKNOWN_RANK = 99
OTHER_STATUS = "Other"

EPOCH = datetime.min.replace(tzinfo=UTC)
# Jira sends offsets without a colon, e.g. 2024-01-15T10:00:00.000+0000
_COMPACT_OFFSET_RE = re.compile(r"([+-]\d{2})(\d{2})$")

IssueT = TypeVar("IssueT", bound=Issue)


class SortState(BaseModel):
    """Column and direction of the table sort."""

    column: str
    direction: Literal["asc", "desc"] = "asc"


def parse_timestamp(value: str) -> datetime:
    """Parse a Jira ISO-8601 timestamp; unparseable values sort first."""
    if not value:
        return EPOCH
    text = value.strip().replace("Z", "+00:00")
    text = _COMPACT_OFFSET_RE.sub(r"\1:\2", text)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def status_rank(status: str) -> int:
    return STATUS_RANK.get(status, UNKNOWN_RANK)


def priority_rank(priority: str) -> int:
    return PRIORITY_RANK.get(priority, UNKNOWN_RANK)


SORT_KEYS: Dict[str, Callable[[Issue], Any]] = {
    "key": lambda i: i.key,
    "summary": lambda i: i.summary,
    "issue_type": lambda i: i.issue_type,
    "assignee": lambda i: i.assignee.display_name if i.assignee else "",
    "status": lambda i: status_rank(i.status),
    "priority": lambda i: priority_rank(i.priority),
    "sprint": lambda i: i.sprint.name if i.sprint else "",
    "created": lambda i: parse_timestamp(i.created),
    "updated": lambda i: parse_timestamp(i.updated),
}


def sort_issues(issues: Iterable[IssueT], sort: SortState | None) -> List[IssueT]:
    """Return a new, stably sorted list; ``None`` keeps fetch order.

    Raises:
        ValueError: Unknown sort column.
    """
    items = list(issues)
    if sort is None:
        return items
    key = SORT_KEYS.get(sort.column)
    if key is None:
        raise ValueError(f"Unknown sort column: {sort.column}")
    # reverse=True keeps equal elements in their original order
    return sorted(items, key=key, reverse=sort.direction == "desc")


def next_sort(current: SortState | None, column: str) -> SortState:
    """Header click: same column flips direction, another column starts asc."""
    if column not in SORT_KEYS:
        raise ValueError(f"Unknown sort column: {column}")
    if current is not None and current.column == column:
        return SortState(column=column, direction="desc" if current.direction == "asc" else "asc")
    return SortState(column=column, direction="asc")


def group_by_status(issues: Iterable[IssueT]) -> Dict[str, List[IssueT]]:
    """Kanban columns: one bucket per known status in rank order, then
    "Other".

    Issues inside a bucket are ordered newest first.
    """
    groups: Dict[str, List[IssueT]] = {status: [] for status in STATUS_RANK}
    for issue in issues:
        bucket = issue.status if issue.status in groups else OTHER_STATUS
        groups.setdefault(bucket, []).append(issue)
    for status, bucket in groups.items():
        groups[status] = sorted(bucket, key=lambda i: parse_timestamp(i.created), reverse=True)
    return groups
