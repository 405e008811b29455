"""Approval flags and remarks derived from issue type, status and labels.

Issue type, status and labels are compared lower-cased and stripped, so
``PM_APPROVED`` and ``pm_approved`` are the same label. The flags are
never stored: ``enrich`` recomputes them on every read.
"""

from typing import Iterable, List

from jiradash.models import EnrichedIssue, Issue

PM_APPROVED_LABEL = "pm_approved"
POST_CHECK_APPROVED_LABEL = "post_check_approved"
TEST_RESULT_APPROVED_LABEL = "test_result_approved"

PM_APPROVAL_ISSUE_TYPES = frozenset({"story", "production bug"})
VERIFICATION_STATUSES = frozenset({"resolved", "testing"})

REMARK_PM = "Need PM Approve"
REMARK_POST_CHECK = "Need Post check"
REMARK_TEST_RESULT = "Need test result"
REMARK_OPTIONS = (REMARK_PM, REMARK_POST_CHECK, REMARK_TEST_RESULT)
NO_REMARKS = "No remarks"

_FLAG_FIELDS = {"pm_approval_required", "post_check_approval_required", "test_result_approval_required"}


def _norm(value: str) -> str:
    return (value or "").strip().lower()


def _label_set(labels: Iterable[str]) -> frozenset[str]:
    return frozenset(_norm(lb) for lb in labels)


def needs_pm_approval(issue_type: str, labels: Iterable[str]) -> bool:
    return _norm(issue_type) in PM_APPROVAL_ISSUE_TYPES and PM_APPROVED_LABEL not in _label_set(labels)


def needs_post_check(status: str, labels: Iterable[str]) -> bool:
    return _norm(status) in VERIFICATION_STATUSES and POST_CHECK_APPROVED_LABEL not in _label_set(labels)


def needs_test_result(status: str, labels: Iterable[str]) -> bool:
    return _norm(status) in VERIFICATION_STATUSES and TEST_RESULT_APPROVED_LABEL not in _label_set(labels)


def enrich(issue: Issue) -> EnrichedIssue:
    """Return a copy of the issue with the three approval flags set.

    Flags already present on the input are ignored and recomputed.
    """
    data = issue.model_dump(exclude=_FLAG_FIELDS)
    return EnrichedIssue(
        **data,
        pm_approval_required=needs_pm_approval(issue.issue_type, issue.labels),
        post_check_approval_required=needs_post_check(issue.status, issue.labels),
        test_result_approval_required=needs_test_result(issue.status, issue.labels),
    )


def remarks(issue: Issue) -> List[str]:
    """Human labels for the outstanding approvals, in fixed order."""
    out = []
    if needs_pm_approval(issue.issue_type, issue.labels):
        out.append(REMARK_PM)
    if needs_post_check(issue.status, issue.labels):
        out.append(REMARK_POST_CHECK)
    if needs_test_result(issue.status, issue.labels):
        out.append(REMARK_TEST_RESULT)
    return out
