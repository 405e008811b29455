"""Tests for DashboardStore (fake gateway client)."""

from typing import List
from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from jiradash.client import GatewayClient, GatewayError
from jiradash.export import ExportConfiguration
from jiradash.models import Issue, Person, Sprint, SprintRef
from jiradash.store import (
    BOARD_ID_REQUIRED,
    BOARDS,
    FETCH_ERROR_MESSAGES,
    ISSUES,
    SPRINTS,
    DashboardStore,
)

BASE = "https://acme.atlassian.net"


def _issue(key: str, status: str, assignee: str | None = None, **kwargs) -> Issue:
    return Issue(
        id=key,
        key=key,
        summary=f"Summary {key}",
        status=status,
        assignee=Person(display_name=assignee) if assignee else None,
        created="2024-01-01T00:00:00.000+0000",
        **kwargs,
    )


ISSUES_A: List[Issue] = [
    _issue("POSC-1", "Open", "Bob", issue_type="Story"),
    _issue("POSC-2", "Testing", "Alice", issue_type="Task"),
    _issue("POSC-3", "Resolved", None, issue_type="Production Bug", labels=["pm_approved"]),
]


@pytest.fixture
def client() -> Mock:
    return Mock(spec=GatewayClient)


@pytest.fixture
def store(client: Mock) -> DashboardStore:
    return DashboardStore(client, browse_base=BASE, default_jql="project = POSC", default_board_id=506)


def test_search_issues_success(store: DashboardStore, client: Mock) -> None:
    """Fetched issues are stored and the slot is idle without error."""
    client.search_issues.return_value = ISSUES_A
    assert store.search_issues() is True
    client.search_issues.assert_called_once_with("project = POSC")
    assert store.issues == ISSUES_A
    assert store.loading(ISSUES) is False
    assert store.error(ISSUES) is None


def test_search_issues_updates_current_jql(store: DashboardStore, client: Mock) -> None:
    """A non-blank query replaces the current JQL; blank keeps it."""
    client.search_issues.return_value = []
    store.search_issues("  assignee = currentUser()  ")
    assert store.current_jql == "assignee = currentUser()"
    store.search_issues("   ")
    assert client.search_issues.call_args[0][0] == "assignee = currentUser()"


def test_failure_sets_only_its_slot(store: DashboardStore, client: Mock) -> None:
    """An issue fetch failure leaves sprint and board slots untouched."""
    client.search_issues.side_effect = GatewayError("500: boom", status_code=500)
    assert store.search_issues() is False
    assert store.error(ISSUES) == FETCH_ERROR_MESSAGES[ISSUES]
    assert store.loading(ISSUES) is False
    assert store.error(SPRINTS) is None
    assert store.error(BOARDS) is None


def test_retry_resubmits_last_query(store: DashboardStore, client: Mock) -> None:
    """Retry clears the error and repeats the same JQL."""
    client.search_issues.side_effect = [GatewayError("down"), ISSUES_A]
    store.search_issues("project = X")
    assert store.error(ISSUES) is not None
    assert store.retry_issues() is True
    assert store.error(ISSUES) is None
    assert [c[0][0] for c in client.search_issues.call_args_list] == ["project = X", "project = X"]


def test_stale_response_is_dropped(store: DashboardStore, client: Mock) -> None:
    """A response that arrives after a newer request started is discarded."""
    older = [_issue("OLD-1", "Open")]
    newer = [_issue("NEW-1", "Open")]
    calls = []

    def fake_search(jql: str) -> List[Issue]:
        calls.append(jql)
        if len(calls) == 1:
            assert store.search_issues("newer query") is True
            return older
        return newer

    client.search_issues.side_effect = fake_search
    assert store.search_issues("older query") is False
    assert [i.key for i in store.issues] == ["NEW-1"]
    assert store.loading(ISSUES) is False


def test_visible_issues_filter_and_sort(store: DashboardStore, client: Mock) -> None:
    """Visible issues are enriched, filtered and sorted."""
    client.search_issues.return_value = ISSUES_A
    store.search_issues()
    store.set_filters(statuses={"Open", "Resolved"})
    store.toggle_sort("status")
    visible = store.visible_issues()
    assert [i.key for i in visible] == ["POSC-3", "POSC-1"]
    assert visible[1].pm_approval_required is True
    assert visible[0].pm_approval_required is False

    store.set_filters(remarks={"Need test result"})
    assert [i.key for i in store.visible_issues()] == ["POSC-3"]
    assert store.filters.statuses == {"Open", "Resolved"}

    store.clear_filters()
    store.clear_sort()
    assert [i.key for i in store.visible_issues()] == ["POSC-1", "POSC-2", "POSC-3"]


def test_summary_and_options(store: DashboardStore, client: Mock) -> None:
    """Summary counts and dropdown options come from fetched issues."""
    client.search_issues.return_value = ISSUES_A
    store.search_issues()
    summary = store.approval_summary()
    assert summary.total == 3
    assert summary.pm_approval_required == 1
    assert summary.post_check_approval_required == 2
    assert "Unassigned" in store.filter_options().assignees


def test_search_sprints_uses_default_board(store: DashboardStore, client: Mock) -> None:
    """Sprints are fetched for the default board and sorted by state then id."""
    client.search_sprints.return_value = [
        Sprint(id=1, name="Sprint 1", state="closed"),
        Sprint(id=3, name="Sprint 3 testing", state="future"),
        Sprint(id=2, name="Sprint 2", state="active"),
        Sprint(id=4, name="Sprint 4", state="future"),
    ]
    assert store.search_sprints(sprint_name="Sprint") is True
    client.search_sprints.assert_called_once_with(506, "Sprint")
    assert [s.id for s in store.sprints] == [2, 4, 3, 1]
    assert [s.id for s in store.visible_sprints("testing")] == [3]
    assert store.sprint_url(store.sprints[0]) == (
        f"{BASE}/secure/RapidBoard.jspa?rapidView=506&view=planning&selectedSprint=2"
    )


def test_search_sprints_without_board(client: Mock) -> None:
    """No board id anywhere sets the error without calling the gateway."""
    store = DashboardStore(client, browse_base=BASE, default_board_id=None)
    assert store.search_sprints() is False
    assert store.error(SPRINTS) == BOARD_ID_REQUIRED
    client.search_sprints.assert_not_called()


def test_list_boards_failure(store: DashboardStore, client: Mock) -> None:
    """Board failures use the board message."""
    client.list_boards.side_effect = GatewayError("down")
    assert store.list_boards() is False
    assert store.error(BOARDS) == FETCH_ERROR_MESSAGES[BOARDS]


def test_export_copy_notifications(store: DashboardStore, client: Mock) -> None:
    """Copy writes selected lines and reports success or failure."""
    client.search_issues.return_value = [
        _issue("POSC-1", "Open", "Bob"),
        _issue("POSC-2", "Open", "Alice"),
    ]
    store.search_issues()
    store.export.config = ExportConfiguration(key=True, status=False, assignee=False, summary=True, remarks=False)
    lines = store.open_export()
    assert [line.issue_key for line in lines] == ["POSC-2", "POSC-1"]

    written = []
    assert store.copy_export(written.append) is True
    assert written == [f"{BASE}/browse/POSC-2, Summary POSC-2\n{BASE}/browse/POSC-1, Summary POSC-1"]
    [note] = store.pop_notifications()
    assert note.level == "success"
    assert note.message == "Copied 2 issue(s) to clipboard"

    def broken(text: str) -> None:
        raise OSError("clipboard unavailable")

    assert store.copy_export(broken) is False
    [note] = store.pop_notifications()
    assert note.level == "error"
    assert note.message == "Failed to copy to clipboard"
    assert store.pop_notifications() == []


def test_export_uses_visible_issues(store: DashboardStore, client: Mock) -> None:
    """Only filtered issues are exported."""
    client.search_issues.return_value = ISSUES_A
    store.search_issues()
    store.set_filters(search_text="posc-2")
    assert [line.issue_key for line in store.open_export()] == ["POSC-2"]


def test_sprintless_issue_filter(store: DashboardStore, client: Mock) -> None:
    """The No Sprint option selects issues without a sprint."""
    client.search_issues.return_value = [
        _issue("A-1", "Open", sprint=SprintRef(id=1, name="Sprint 1", state="active")),
        _issue("A-2", "Open"),
    ]
    store.search_issues()
    store.set_filters(sprints={"No Sprint"})
    assert [i.key for i in store.visible_issues()] == ["A-2"]


def test_unexpected_error_clears_loading(store: DashboardStore, client: Mock) -> None:
    """Any client failure ends the request with the fixed error message."""
    client.search_sprints.side_effect = RuntimeError("boom")
    assert store.search_sprints() is False
    assert store.loading(SPRINTS) is False
    assert store.error(SPRINTS) == FETCH_ERROR_MESSAGES[SPRINTS]
    assert store.error(ISSUES) is None

    client.search_sprints.side_effect = None
    client.search_sprints.return_value = [Sprint(id=1, name="Sprint 1", state="active")]
    assert store.search_sprints() is True
    assert store.error(SPRINTS) is None


def test_unknown_filter_category_rejected(store: DashboardStore) -> None:
    """A misspelled filter category raises instead of being ignored."""
    store.set_filters(statuses={"Open"})
    with pytest.raises(ValidationError):
        store.set_filters(status={"Done"})
    assert store.filters.statuses == {"Open"}
