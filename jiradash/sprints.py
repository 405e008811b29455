"""Sprint ordering and name/group matching.

Shared by the gateway (raw sprint dicts) and the dashboard (Sprint
models).
"""

from typing import Any, Dict, Iterable, List

from jiradash.models import Sprint

SPRINT_STATE_ORDER: Dict[str, int] = {"active": 0, "future": 1, "closed": 2}

# Best-effort classification on free text; sprint names follow team habit, not a contract
SPRINT_GROUPS: Dict[str, tuple[str, ...]] = {
    "resolve": ("resolve",),
    "regression": ("regression",),
    "testing": ("testing", "test"),
}


def sprint_state_rank(state: Any) -> int:
    if not isinstance(state, str):
        return len(SPRINT_STATE_ORDER)
    return SPRINT_STATE_ORDER.get(state.lower(), len(SPRINT_STATE_ORDER))


def name_matches(name: Any, sprint_name: str | None) -> bool:
    """Case-insensitive substring match; a blank filter matches all."""
    if not sprint_name or not sprint_name.strip():
        return True
    return isinstance(name, str) and sprint_name.strip().lower() in name.lower()


def filter_sprint_payloads(values: Iterable[Any], sprint_name: str | None) -> List[Dict[str, Any]]:
    """Filter raw sprint records by name and order active, future, closed.

    Order within one state is kept as received.
    """
    kept = [v for v in values if isinstance(v, dict) and name_matches(v.get("name"), sprint_name)]
    return sorted(kept, key=lambda v: sprint_state_rank(v.get("state")))


def sort_sprints(sprints: Iterable[Sprint]) -> List[Sprint]:
    """Active first, then future, then closed; newest id first inside a state."""
    return sorted(sprints, key=lambda s: (sprint_state_rank(s.state), -s.id))


def sprint_matches_group(sprint: Sprint, group: str) -> bool:
    """Match a sprint against a named group by searching its name and goal.

    ``all`` matches every sprint; unknown groups match none.
    """
    if group == "all":
        return True
    needles = SPRINT_GROUPS.get(group)
    if not needles:
        return False
    haystack = f"{sprint.name} {sprint.goal or ''}".lower()
    return any(n in haystack for n in needles)
