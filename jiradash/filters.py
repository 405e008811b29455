"""Issue filtering: free text plus multi-select status, assignee, sprint and
remark sets.

Categories combine with AND; values inside one category combine with
OR. An empty selection disables its category.
"""

from typing import Iterable, List, Set, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from jiradash.approvals import REMARK_OPTIONS, enrich, remarks
from jiradash.models import Issue

UNASSIGNED = "Unassigned"
NO_SPRINT = "No Sprint"

IssueT = TypeVar("IssueT", bound=Issue)


class FilterState(BaseModel):
    """Current filter selection of the dashboard."""

    model_config = ConfigDict(extra="forbid")

    search_text: str = ""
    statuses: Set[str] = Field(default_factory=set)
    assignees: Set[str] = Field(default_factory=set)
    sprints: Set[str] = Field(default_factory=set)
    remarks: Set[str] = Field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not (self.search_text.strip() or self.statuses or self.assignees or self.sprints or self.remarks)


class FilterOptions(BaseModel):
    """Values offered by the filter dropdowns."""

    statuses: List[str] = Field(default_factory=list)
    assignees: List[str] = Field(default_factory=list)
    sprints: List[str] = Field(default_factory=list)
    remarks: List[str] = Field(default_factory=lambda: list(REMARK_OPTIONS))


class ApprovalSummary(BaseModel):
    """Counts shown next to the filters."""

    total: int = 0
    pm_approval_required: int = 0
    post_check_approval_required: int = 0
    test_result_approval_required: int = 0


def _matches_text(issue: Issue, needle: str) -> bool:
    return (
        needle in issue.key.lower()
        or needle in issue.summary.lower()
        or needle in (issue.description or "").lower()
    )


def _matches_sprint(issue: Issue, selected: Set[str]) -> bool:
    if issue.sprint is None:
        return NO_SPRINT in selected
    return issue.sprint.name in selected


def matches(issue: Issue, state: FilterState) -> bool:
    """True if the issue passes every enabled predicate."""
    needle = state.search_text.strip().lower()
    if needle and not _matches_text(issue, needle):
        return False
    if state.statuses and issue.status not in state.statuses:
        return False
    if state.assignees and issue.assignee_name not in state.assignees:
        return False
    if state.sprints and not _matches_sprint(issue, state.sprints):
        return False
    if state.remarks and not state.remarks.intersection(remarks(issue)):
        return False
    return True


def filter_issues(issues: Iterable[IssueT], state: FilterState) -> List[IssueT]:
    """Return the issues passing all predicates, in input order."""
    return [issue for issue in issues if matches(issue, state)]


def filter_options(issues: Iterable[Issue]) -> FilterOptions:
    """Collect the distinct values available for each dropdown."""
    statuses: Set[str] = set()
    assignees: Set[str] = set()
    sprints: Set[str] = set()
    unassigned = no_sprint = False
    for issue in issues:
        if issue.status:
            statuses.add(issue.status)
        if issue.assignee is None or not issue.assignee.display_name:
            unassigned = True
        else:
            assignees.add(issue.assignee.display_name)
        if issue.sprint is None:
            no_sprint = True
        elif issue.sprint.name:
            sprints.add(issue.sprint.name)
    return FilterOptions(
        statuses=sorted(statuses),
        assignees=sorted(assignees) + ([UNASSIGNED] if unassigned else []),
        sprints=sorted(sprints) + ([NO_SPRINT] if no_sprint else []),
    )


def approval_summary(issues: Iterable[Issue]) -> ApprovalSummary:
    summary = ApprovalSummary()
    for issue in issues:
        flags = enrich(issue)
        summary.total += 1
        summary.pm_approval_required += flags.pm_approval_required
        summary.post_check_approval_required += flags.post_check_approval_required
        summary.test_result_approval_required += flags.test_result_approval_required
    return summary
