"""Board model."""

from pydantic import BaseModel


class BoardLocation(BaseModel):
    """Project the board is attached to."""

    project_id: int | None = None
    project_key: str | None = None
    project_name: str | None = None


class Board(BaseModel):
    """Scrum or kanban board."""

    id: int
    name: str
    type: str = ""
    location: BoardLocation | None = None
