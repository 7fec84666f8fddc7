"""Participant model for players who joined a game.

Each row links one user to one game and records the time that user voted
for. Join order (``joined_at``) decides who owns the game.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from courtside.models.game import Game


class Participant(SQLModel, table=True):
    """A player taking part in a game.

    Attributes:
        game_id: Foreign key to the parent Game. Part of the primary key.
        user_id: Identifier of the player. Part of the primary key.
        joined_at: When the player joined. The earliest joiner owns the game.
        voted_time: The start time this player voted for, if any.
        status_note: Free-text message from the player ("running late").
        game: Reference to the parent Game object.
    """
    game_id: UUID = Field(foreign_key="game.id", primary_key=True)
    user_id: str = Field(primary_key=True, index=True)
    joined_at: datetime | None = Field(default_factory=lambda: datetime.now(UTC))
    voted_time: str | None = None
    status_note: str | None = None

    # Relationship
    game: Optional["Game"] = Relationship(back_populates="participants")
