"""Dashboard state container.

One store per user session: fetched issues, sprints and boards, each
with its own loading/error slot, plus filter, sort and export state.
Nothing is module-global, so tests and sessions get isolated stores.

Every fetch takes a sequence number for its kind; a response that is no
longer the newest for that kind is dropped, so the last request wins.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Literal

from pydantic import BaseModel

from jiradash.approvals import enrich
from jiradash.client import GatewayClient, GatewayError
from jiradash.config import DEFAULT_JQL, AppConfig
from jiradash.export import ExportLine, ExportSession
from jiradash.filters import ApprovalSummary, FilterOptions, FilterState, approval_summary, filter_issues, filter_options
from jiradash.models import Board, EnrichedIssue, Issue, Sprint
from jiradash.sorting import SortState, next_sort, sort_issues
from jiradash.sprints import sort_sprints, sprint_matches_group
from jiradash.utils import sprint_board_url

LOG = logging.getLogger("jiradash.store")

ISSUES = "issues"
SPRINTS = "sprints"
BOARDS = "boards"

FETCH_ERROR_MESSAGES = {
    ISSUES: "Failed to fetch issues. Please check your connection and try again.",
    SPRINTS: "Failed to fetch sprints. Please check your connection and try again.",
    BOARDS: "Failed to fetch boards. Please check your connection and try again.",
}
BOARD_ID_REQUIRED = "Board ID is required"


class RequestSlot(BaseModel):
    """Loading/error state of one request kind."""

    loading: bool = False
    error: str | None = None
    sequence: int = 0


class Notification(BaseModel):
    """Transient toast message."""

    level: Literal["success", "error", "info"]
    message: str


class DashboardStore:
    """State of one dashboard session."""

    def __init__(
        self,
        client: GatewayClient,
        browse_base: str,
        default_jql: str = DEFAULT_JQL,
        default_board_id: int | None = None,
    ) -> None:
        self._client = client
        self._browse_base = browse_base
        self._lock = threading.Lock()
        self.default_board_id = default_board_id
        self.current_jql = default_jql
        self.issues: List[Issue] = []
        self.sprints: List[Sprint] = []
        self.boards: List[Board] = []
        self.slots: Dict[str, RequestSlot] = {kind: RequestSlot() for kind in FETCH_ERROR_MESSAGES}
        self.filters = FilterState()
        self.sort: SortState | None = None
        self.export = ExportSession(browse_base)
        self.notifications: List[Notification] = []

    @classmethod
    def from_config(cls, config: AppConfig) -> "DashboardStore":
        client = GatewayClient(config.dashboard.api_url, timeout=config.dashboard.timeout)
        return cls(
            client,
            browse_base=config.jira.base_url,
            default_jql=config.jira.default_jql,
            default_board_id=config.jira.default_board_id,
        )

    # Request bookkeeping

    def _begin(self, kind: str) -> int:
        with self._lock:
            slot = self.slots[kind]
            slot.sequence += 1
            slot.loading = True
            slot.error = None
            return slot.sequence

    def _finish(
        self,
        kind: str,
        sequence: int,
        apply: Callable[[], None] | None = None,
        error: str | None = None,
    ) -> bool:
        """Apply a response if it is still the newest for its kind."""
        with self._lock:
            slot = self.slots[kind]
            if sequence != slot.sequence:
                LOG.warning("Dropping stale %s response #%d (latest #%d)", kind, sequence, slot.sequence)
                return False
            if apply is not None:
                apply()
            slot.loading = False
            slot.error = error
            return True

    def _fetch(self, kind: str, call: Callable[[], Any], apply: Callable[[Any], None]) -> bool:
        sequence = self._begin(kind)
        try:
            result = call()
        except GatewayError as e:
            LOG.error("Failed to fetch %s: %s", kind, e)
            self._finish(kind, sequence, error=FETCH_ERROR_MESSAGES[kind])
            return False
        except Exception:
            LOG.exception("Unexpected error while fetching %s", kind)
            self._finish(kind, sequence, error=FETCH_ERROR_MESSAGES[kind])
            return False
        return self._finish(kind, sequence, apply=lambda: apply(result))

    def loading(self, kind: str) -> bool:
        return self.slots[kind].loading

    def error(self, kind: str) -> str | None:
        return self.slots[kind].error

    # Issues

    def search_issues(self, jql: str | None = None) -> bool:
        """Fetch issues for ``jql`` (or the current JQL); True if applied."""
        if jql is not None and jql.strip():
            self.current_jql = jql.strip()
        query = self.current_jql

        def apply(issues: List[Issue]) -> None:
            self.issues = issues

        return self._fetch(ISSUES, lambda: self._client.search_issues(query), apply)

    def retry_issues(self) -> bool:
        """Resubmit the last issue search unchanged."""
        return self.search_issues()

    def visible_issues(self) -> List[EnrichedIssue]:
        """Enrich, filter and sort the fetched issues."""
        enriched = [enrich(issue) for issue in self.issues]
        return sort_issues(filter_issues(enriched, self.filters), self.sort)

    def filter_options(self) -> FilterOptions:
        return filter_options(self.issues)

    def approval_summary(self) -> ApprovalSummary:
        return approval_summary(self.issues)

    def set_filters(self, **changes: Any) -> FilterState:
        """Replace some filter categories, e.g. ``set_filters(statuses={"Open"})``."""
        self.filters = FilterState(**{**self.filters.model_dump(), **changes})
        return self.filters

    def clear_filters(self) -> None:
        self.filters = FilterState()

    def toggle_sort(self, column: str) -> SortState:
        self.sort = next_sort(self.sort, column)
        return self.sort

    def clear_sort(self) -> None:
        self.sort = None

    # Sprints and boards

    def search_sprints(self, board_id: int | str | None = None, sprint_name: str | None = None) -> bool:
        board = board_id if board_id not in (None, "") else self.default_board_id
        if board in (None, ""):
            with self._lock:
                self.slots[SPRINTS].error = BOARD_ID_REQUIRED
            return False

        def apply(sprints: List[Sprint]) -> None:
            self.sprints = sort_sprints(sprints)

        return self._fetch(SPRINTS, lambda: self._client.search_sprints(board, sprint_name), apply)

    def visible_sprints(self, group: str = "all") -> List[Sprint]:
        return [s for s in self.sprints if sprint_matches_group(s, group)]

    def sprint_url(self, sprint: Sprint) -> str:
        board = sprint.board_id or self.default_board_id or 0
        return sprint_board_url(self._browse_base, board, sprint.id)

    def list_boards(self, board_type: str | None = None, max_results: int | None = None) -> bool:
        def apply(boards: List[Board]) -> None:
            self.boards = boards

        return self._fetch(BOARDS, lambda: self._client.list_boards(board_type, max_results), apply)

    # Export

    def open_export(self) -> List[ExportLine]:
        """Generate export lines from the currently visible issues."""
        return self.export.generate(self.visible_issues())

    def copy_export(self, write: Callable[[str], Any]) -> bool:
        """Send selected export lines to ``write`` (the clipboard).

        A failing write becomes an error notification.
        """
        text = self.export.text()
        try:
            write(text)
        except Exception as e:
            LOG.warning("Clipboard write failed: %s", e)
            self.notify("error", "Failed to copy to clipboard")
            return False
        self.notify("success", f"Copied {self.export.selected_count} issue(s) to clipboard")
        return True

    # Notifications

    def notify(self, level: Literal["success", "error", "info"], message: str) -> None:
        self.notifications.append(Notification(level=level, message=message))

    def pop_notifications(self) -> List[Notification]:
        out, self.notifications = self.notifications, []
        return out
