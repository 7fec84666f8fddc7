"""Value types shared by the reconciliation engine.

Snapshots are plain, detached copies of what the store returned for one
read. The engine only ever sees snapshots, never ORM rows, so that every
derivation is a pure function of data fetched at a single point in time.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

# Participants required to confirm a game or lock in a voted time.
# Fixed for every activity type.
QUORUM = 4

PLACEHOLDER_NAME = "Unknown"


class DisplayStatus(str, Enum):
    """Status of a game as derived by the reconciler."""
    SCHEDULED = "scheduled"
    TENTATIVE_VOTING = "tentative_voting"
    CONFIRMED = "confirmed"


class ParticipantSnapshot(BaseModel):
    """One participant row as fetched, with its profile if one exists."""
    user_id: str
    joined_at: datetime | None = None
    voted_time: str | None = None
    status_note: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None


class GameSnapshot(BaseModel):
    """Raw stored fields of one game.

    ``candidate_times`` is kept exactly as stored; it is decoded by the
    engine, not by the store.
    """
    id: UUID
    game_date: date | None = None
    primary_time: str
    duration_minutes: int | None = None
    activity_type: str | None = None
    location: str | None = None
    note: str | None = None
    candidate_times: Any = None
    tentative: bool | None = None
    status: str | None = None
    host_id: str | None = None


class ReconciledView(BaseModel):
    """Status of a game recomputed from its participants."""
    game_id: UUID
    canonical_time: str
    status: DisplayStatus
    tentative: bool
    owner_id: str | None = None
    participant_count: int = 0
    vote_counts: dict[str, int] = Field(default_factory=dict)
    stale_votes: int = 0
    downgraded: bool = False

    @property
    def active(self) -> bool:
        return self.participant_count > 0


class ParticipantView(BaseModel):
    user_id: str
    display_name: str
    avatar_url: str | None = None
    voted_time: str | None = None
    status_note: str | None = None
    joined_at: datetime | None = None
    is_owner: bool = False


class GameView(BaseModel):
    """Everything presentation code needs to show one game."""
    id: UUID
    game_date: date | None = None
    duration_minutes: int
    activity_type: str | None = None
    location: str | None = None
    note: str | None = None
    primary_time: str
    candidate_times: list[str] = Field(default_factory=list)
    participants: list[ParticipantView] = Field(default_factory=list)
    reconciled: ReconciledView

    @property
    def active(self) -> bool:
        return self.reconciled.active


class GameDraft(BaseModel):
    """Fields supplied by the creator of a new game."""
    game_date: date
    primary_time: str
    duration_minutes: int = 120
    activity_type: str = "Padel"
    location: str = ""
    note: str | None = None
    candidate_times: list[str] = Field(default_factory=list)


class GameChanges(BaseModel):
    """Host edit. Fields left as None are not changed."""
    game_date: date | None = None
    primary_time: str | None = None
    duration_minutes: int | None = None
    activity_type: str | None = None
    location: str | None = None
    note: str | None = None
    candidate_times: list[str] | None = None
