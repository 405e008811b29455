"""Abstract base for issue tracker adapters."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class TrackerError(Exception):
    """Raised when an issue tracker API call fails.

    ``status_code`` is the upstream HTTP status, or None when no response
    arrived. ``details`` holds the raw upstream payload for diagnostics.
    """

    def __init__(self, message: str, status_code: int | None = None, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class TrackerConfigError(TrackerError):
    """Raised before any request when credentials are not configured."""

    pass


class IssueTrackerAdapter(ABC):
    """Read-only interface to an issue tracker (Jira Cloud REST and Agile
    APIs).

    Methods return the tracker's raw JSON so the gateway can pass it
    through unchanged.
    """

    @abstractmethod
    def search_issues(self, jql: str, fields: List[str], max_results: int) -> Dict[str, Any]:
        """Run a JQL search."""
        ...

    @abstractmethod
    def list_fields(self) -> List[Dict[str, Any]]:
        """List all issue fields of the site."""
        ...

    @abstractmethod
    def list_board_sprints(self, board_id: str, max_results: int = 1000) -> Dict[str, Any]:
        """List sprints of a board."""
        ...

    @abstractmethod
    def get_sprint(self, sprint_id: str) -> Dict[str, Any]:
        """Fetch one sprint."""
        ...

    @abstractmethod
    def list_boards(self, board_type: str | None = None, max_results: int | None = None) -> Dict[str, Any]:
        """List boards, optionally of one type (scrum, kanban)."""
        ...

    def myself(self) -> Dict[str, Any]:
        """Return the authenticated account. Override if needed."""
        raise NotImplementedError("myself")
