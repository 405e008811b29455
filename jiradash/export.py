"""Clipboard export: one configurable text line per issue.

Lines are ordered by assignee name. Each line has its own ``selected``
flag; only selected lines end up in the exported text.
"""

import logging
from typing import Callable, Dict, Iterable, List

from pydantic import BaseModel, Field

from jiradash.approvals import NO_REMARKS, remarks
from jiradash.filters import NO_SPRINT
from jiradash.models import Issue
from jiradash.utils import format_date, issue_browse_url

LOG = logging.getLogger("jiradash.export")

EXPORT_FIELD_ORDER = (
    "key",
    "status",
    "assignee",
    "summary",
    "remarks",
    "priority",
    "sprint",
    "issue_type",
    "created",
    "updated",
)
FIELD_SEPARATOR = ", "
LINE_SEPARATOR = "\n"


class ExportConfiguration(BaseModel):
    """Which fields appear in each exported line."""

    key: bool = True
    status: bool = True
    assignee: bool = True
    summary: bool = True
    remarks: bool = True
    priority: bool = False
    sprint: bool = False
    issue_type: bool = False
    created: bool = False
    updated: bool = False

    def enabled_fields(self) -> List[str]:
        return [name for name in EXPORT_FIELD_ORDER if getattr(self, name)]


class ExportLine(BaseModel):
    """One generated line and whether it goes to the clipboard."""

    issue_key: str
    text: str
    selected: bool = True


def remarks_text(issue: Issue) -> str:
    items = remarks(issue)
    return FIELD_SEPARATOR.join(items) if items else NO_REMARKS


def _renderers(browse_base: str) -> Dict[str, Callable[[Issue], str]]:
    return {
        "key": lambda i: issue_browse_url(browse_base, i.key),
        "status": lambda i: i.status,
        "assignee": lambda i: i.assignee_name,
        "summary": lambda i: i.summary,
        "remarks": remarks_text,
        "priority": lambda i: i.priority,
        "sprint": lambda i: i.sprint.name if i.sprint else NO_SPRINT,
        "issue_type": lambda i: i.issue_type,
        "created": lambda i: format_date(i.created),
        "updated": lambda i: format_date(i.updated),
    }


def export_order(issues: Iterable[Issue]) -> List[Issue]:
    """Stable sort by assignee display name ("Unassigned" is not pinned)."""
    return sorted(issues, key=lambda i: i.assignee_name)


def build_export_lines(issues: Iterable[Issue], config: ExportConfiguration, browse_base: str) -> List[ExportLine]:
    """Render issues as export lines (all selected) in assignee order."""
    renderers = _renderers(browse_base)
    fields = config.enabled_fields()
    return [
        ExportLine(
            issue_key=issue.key,
            text=FIELD_SEPARATOR.join(renderers[name](issue) for name in fields),
        )
        for issue in export_order(issues)
    ]


class ExportSession:
    """Export dialog state: field toggles, generated lines, selection."""

    def __init__(self, browse_base: str, config: ExportConfiguration | None = None) -> None:
        self._browse_base = browse_base
        self.config = config or ExportConfiguration()
        self.lines: List[ExportLine] = []
        self._issues: List[Issue] = []

    def generate(self, issues: Iterable[Issue]) -> List[ExportLine]:
        """Regenerate lines for the issues, keeping selection by issue key.

        Issues not seen before start selected.
        """
        self._issues = list(issues)
        previous = {line.issue_key: line.selected for line in self.lines}
        lines = build_export_lines(self._issues, self.config, self._browse_base)
        for line in lines:
            line.selected = previous.get(line.issue_key, True)
        self.lines = lines
        LOG.debug("Generated %d export lines with fields %s", len(lines), self.config.enabled_fields())
        return self.lines

    def toggle_field(self, name: str) -> List[ExportLine]:
        """Flip one field toggle and regenerate the lines.

        Raises:
            ValueError: Unknown field name.
        """
        if name not in EXPORT_FIELD_ORDER:
            raise ValueError(f"Unknown export field: {name}")
        self.config = self.config.model_copy(update={name: not getattr(self.config, name)})
        return self.generate(self._issues)

    @property
    def select_all(self) -> bool:
        """True when there are lines and every one is selected."""
        return bool(self.lines) and all(line.selected for line in self.lines)

    def set_select_all(self, value: bool) -> None:
        for line in self.lines:
            line.selected = value

    def toggle_line(self, issue_key: str) -> bool:
        """Flip selection of the line for ``issue_key``; return the new
        value.

        Raises:
            KeyError: No line for that issue.
        """
        for line in self.lines:
            if line.issue_key == issue_key:
                line.selected = not line.selected
                return line.selected
        raise KeyError(issue_key)

    @property
    def selected_count(self) -> int:
        return sum(1 for line in self.lines if line.selected)

    def text(self) -> str:
        """Selected lines joined by newlines, in generated order."""
        return LINE_SEPARATOR.join(line.text for line in self.lines if line.selected)
