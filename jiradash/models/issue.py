"""Canonical Jira issue model."""

from typing import List

from pydantic import BaseModel, Field


class Person(BaseModel):
    """Assignee or reporter as shown in the dashboard."""

    display_name: str = ""
    email_address: str = ""


class SprintRef(BaseModel):
    """Sprint an issue currently belongs to."""

    id: int | str
    name: str
    state: str | None = None


class Issue(BaseModel):
    """One tracked work item, normalized from the tracker payload.

    Approval flags are not stored here; see ``jiradash.approvals.enrich``.
    """

    id: str = ""
    key: str = ""
    summary: str = ""
    description: str = ""
    status: str = ""
    priority: str = ""
    issue_type: str = ""
    assignee: Person | None = None
    reporter: Person = Field(default_factory=Person)
    created: str = ""
    updated: str = ""
    labels: List[str] = Field(default_factory=list)
    sprint: SprintRef | None = None

    @property
    def assignee_name(self) -> str:
        """Display name, or "Unassigned" when nobody is assigned."""
        if self.assignee is None or not self.assignee.display_name:
            return "Unassigned"
        return self.assignee.display_name


class EnrichedIssue(Issue):
    """Issue with derived approval flags, produced on every read."""

    pm_approval_required: bool = False
    post_check_approval_required: bool = False
    test_result_approval_required: bool = False
