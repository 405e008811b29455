"""Data models for issues, sprints and boards (Pydantic)."""

from jiradash.models.board import Board, BoardLocation
from jiradash.models.issue import EnrichedIssue, Issue, Person, SprintRef
from jiradash.models.sprint import Sprint

__all__ = ["Board", "BoardLocation", "EnrichedIssue", "Issue", "Person", "Sprint", "SprintRef"]
