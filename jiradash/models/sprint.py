"""Sprint model."""

from pydantic import BaseModel


class Sprint(BaseModel):
    """Bounded iteration on a board (state: closed, active or future)."""

    id: int
    name: str
    state: str
    board_id: int | None = None
    start_date: str | None = None
    end_date: str | None = None
    complete_date: str | None = None
    goal: str | None = None
