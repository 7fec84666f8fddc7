"""Derive game ownership from participant join order.

The owner of a game is whoever joined first. The stored ``host_id`` column
is only a hint for the write policy; it is never read back to decide who
owns a game.
"""
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel

from courtside.engine.types import ParticipantSnapshot

# Participants with no join time sort before everyone else
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class LeaveKind(str, Enum):
    NOT_PARTICIPANT = "not_participant"
    LEAVE = "leave"
    TRANSFER = "transfer"
    CASCADE = "cascade"


class LeavePlan(BaseModel):
    """What happens when a user leaves a game.

    Attributes:
        kind: NOT_PARTICIPANT if the user is not in the game, LEAVE for a
            non-owner leaving, TRANSFER when the owner leaves and others
            remain, CASCADE when the owner is the last participant.
        owner_id: Owner before the leave.
        successor_id: Owner after the leave (TRANSFER only).
        remaining: Number of participants left afterwards.
    """
    kind: LeaveKind
    owner_id: str | None = None
    successor_id: str | None = None
    remaining: int = 0


def _join_key(item: tuple[int, ParticipantSnapshot]) -> tuple[datetime, int]:
    position, participant = item
    joined_at = participant.joined_at or _EPOCH
    if joined_at.tzinfo is None:
        # SQLite hands back naive datetimes; stored values are UTC
        joined_at = joined_at.replace(tzinfo=UTC)
    return joined_at, position


def order_participants(participants: list[ParticipantSnapshot]) -> list[ParticipantSnapshot]:
    """Sort participants by join time, keeping fetch order for ties."""
    return [p for _, p in sorted(enumerate(participants), key=_join_key)]


def resolve_owner(participants: list[ParticipantSnapshot]) -> str | None:
    """Return the user id of the earliest joiner, or None for an empty game."""
    if not participants:
        return None
    return min(enumerate(participants), key=_join_key)[1].user_id


def plan_leave(participants: list[ParticipantSnapshot], leaving_user_id: str) -> LeavePlan:
    """Decide whether a leave is a plain leave, a transfer or a cascade."""
    owner_id = resolve_owner(participants)

    if not any(p.user_id == leaving_user_id for p in participants):
        return LeavePlan(
            kind=LeaveKind.NOT_PARTICIPANT, owner_id=owner_id, remaining=len(participants)
        )

    remaining = [p for p in participants if p.user_id != leaving_user_id]

    if leaving_user_id != owner_id:
        return LeavePlan(kind=LeaveKind.LEAVE, owner_id=owner_id, remaining=len(remaining))

    if not remaining:
        return LeavePlan(kind=LeaveKind.CASCADE, owner_id=owner_id, remaining=0)

    return LeavePlan(
        kind=LeaveKind.TRANSFER,
        owner_id=owner_id,
        successor_id=resolve_owner(remaining),
        remaining=len(remaining),
    )
