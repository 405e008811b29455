"""Shared display helpers (Jira links, date formatting)."""

from jiradash.sorting import EPOCH, parse_timestamp


def issue_browse_url(base_url: str, issue_key: str) -> str:
    """Return the Jira browse URL for an issue key.

    Args:
        base_url: Jira site URL, with or without trailing slash.
        issue_key: Human-facing key, e.g. "PROJ-123".

    Returns:
        URL such as "https://example.atlassian.net/browse/PROJ-123".
    """
    return f"{base_url.rstrip('/')}/browse/{issue_key}"


def sprint_board_url(base_url: str, board_id: int, sprint_id: int | None = None) -> str:
    """Return the board URL, opened on the sprint's planning view when given."""
    url = f"{base_url.rstrip('/')}/secure/RapidBoard.jspa?rapidView={board_id}"
    if sprint_id:
        url += f"&view=planning&selectedSprint={sprint_id}"
    return url


def format_date(value: str) -> str:
    """Format an ISO timestamp as "Jan 05, 2024"; unparseable input is
    returned unchanged."""
    parsed = parse_timestamp(value)
    if parsed == EPOCH:
        return value
    return parsed.strftime("%b %d, %Y")
