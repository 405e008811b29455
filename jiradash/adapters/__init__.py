"""Issue tracker adapters."""

from jiradash.adapters.base import IssueTrackerAdapter, TrackerConfigError, TrackerError
from jiradash.adapters.jira import JiraAdapter

__all__ = ["IssueTrackerAdapter", "JiraAdapter", "TrackerConfigError", "TrackerError"]
