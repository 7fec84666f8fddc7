"""Game model for scheduled meetups.

This module defines the Game model which represents a single scheduled
meetup (a padel match, a tennis session) together with its proposed
alternative start times. The ``status``, ``tentative`` and ``host_id``
columns are advisory: writes to them may be rejected by the write policy,
so readers reconstruct the true state from the participant rows.
"""

from datetime import UTC, date, datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from courtside.models.participant import Participant


class GameStatus(str, Enum):
    """Values persisted in ``Game.status``."""
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Game(SQLModel, table=True):
    """A meetup that players can join and vote on.

    Attributes:
        id: Unique identifier (UUID).
        game_date: Calendar day the game is played on.
        primary_time: Main proposed start time ("HH:MM"). Replaced by the
            winning time once a vote locks in.
        duration_minutes: Planned length of the game.
        activity_type: What is being played, e.g. "Padel".
        location: Where the game takes place.
        note: Free-text note from the host.
        candidate_times: Alternative start times, stored as text. Normally a
            JSON array, but older rows may hold a braced literal such as
            ``{"19:00","20:00"}``.
        tentative: True while the time vote is unresolved.
        status: Last persisted status, one of GameStatus. Advisory.
        host_id: Last persisted owner. Advisory; the owner is recomputed
            from participant join order on every read.
        created_at: When the game was created.
        updated_at: When the row was last written.
        participants: Players who joined the game.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    game_date: date = Field(index=True)
    primary_time: str
    duration_minutes: int = Field(default=120)
    activity_type: str = Field(default="Padel")
    location: str = Field(default="")
    note: str | None = None
    candidate_times: str | None = None
    tentative: bool = Field(default=False)
    status: str = Field(default=GameStatus.SCHEDULED.value)
    host_id: str | None = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationship
    participants: list["Participant"] = Relationship(back_populates="game")
