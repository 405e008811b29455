"""Tests for jiradash.utils (Jira links and date formatting)."""

from jiradash.utils import format_date, issue_browse_url, sprint_board_url


def test_issue_browse_url() -> None:
    """Trailing slash on the base URL is ignored."""
    assert issue_browse_url("https://acme.atlassian.net/", "POSC-1") == "https://acme.atlassian.net/browse/POSC-1"


def test_sprint_board_url() -> None:
    """Board URL with and without sprint."""
    base = "https://acme.atlassian.net"
    assert sprint_board_url(base, 506) == f"{base}/secure/RapidBoard.jspa?rapidView=506"
    assert sprint_board_url(base, 506, 5526) == (
        f"{base}/secure/RapidBoard.jspa?rapidView=506&view=planning&selectedSprint=5526"
    )


def test_format_date() -> None:
    """ISO timestamps render as Mon dd, yyyy; junk passes through."""
    assert format_date("2024-01-05T10:00:00.000+0000") == "Jan 05, 2024"
    assert format_date("not a date") == "not a date"
    assert format_date("") == ""
