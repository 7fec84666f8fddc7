"""Profile model for player display information."""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class Profile(SQLModel, table=True):
    """Public identity of a player.

    Profiles are optional: a participant whose profile row is missing is
    shown with a placeholder identity instead of failing the whole view.

    Attributes:
        user_id: Identifier of the player (primary key).
        display_name: Name shown next to the player's vote.
        avatar_url: Optional picture URL.
        phone: Optional contact number.
        updated_at: When the profile was last saved.
    """
    user_id: str = Field(primary_key=True)
    display_name: str = Field(default="Player")
    avatar_url: str | None = None
    phone: str | None = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
