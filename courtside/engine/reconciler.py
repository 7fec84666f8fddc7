"""Reconcile a game's true status from its participants.

The stored ``status``, ``tentative`` and ``host_id`` columns cannot be
trusted: a participant write and a status write are separate commits, and
the status write may be rejected by the write policy. Every read therefore
rebuilds the status from primitives:

    1. Stored "confirmed" with fewer than QUORUM players is downgraded.
    2. While a time vote is open, a candidate with QUORUM votes confirms
       the game at that time; otherwise the game is tentatively voting.
    3. Without an open vote, QUORUM players confirm the game at its
       primary time; fewer leave it scheduled.

``reconcile`` is pure. Persisting its outcome is a separate, best-effort
step (``write_intents`` + ``persist_view``) whose failure never changes the
view already handed to the caller.
"""
import logging
from typing import TYPE_CHECKING

from courtside.core.config import settings
from courtside.engine.decode import candidate_list, decode_candidate_times
from courtside.engine.ownership import order_participants, resolve_owner
from courtside.engine.tally import tally_votes
from courtside.engine.types import (
    PLACEHOLDER_NAME,
    QUORUM,
    DisplayStatus,
    GameSnapshot,
    GameView,
    ParticipantSnapshot,
    ParticipantView,
    ReconciledView,
)
from courtside.errors import StoreError
from courtside.models import GameStatus

if TYPE_CHECKING:
    from courtside.store.games import GameStore

logger = logging.getLogger(__name__)


def voting_open(record: GameSnapshot, candidate_times: list[str]) -> bool:
    """
    Whether the time vote is still unresolved.

    A lock-in write sets ``tentative=False`` and the winning
    ``primary_time`` in the same row write, so a stored False next to a
    non-empty candidate list means a winner was already locked in. A
    missing flag is treated as open.
    """
    return bool(candidate_times) and record.tentative is not False


def reconcile(record: GameSnapshot, participants: list[ParticipantSnapshot]) -> ReconciledView:
    """Derive the canonical view of a game from a single snapshot."""
    count = len(participants)
    candidate_times = decode_candidate_times(record.candidate_times)
    candidates = candidate_list(record.primary_time, candidate_times)
    tally = tally_votes(candidates, participants)

    # Never short-circuit on a stored "confirmed": recompute, and remember
    # when the stored value is no longer valid.
    downgraded = record.status == GameStatus.CONFIRMED.value and count < QUORUM

    if voting_open(record, candidate_times):
        winner = tally.winner(QUORUM)
        if winner is not None:
            status, canonical_time, tentative = DisplayStatus.CONFIRMED, winner, False
        else:
            status, canonical_time, tentative = (
                DisplayStatus.TENTATIVE_VOTING,
                record.primary_time,
                True,
            )
    else:
        status = DisplayStatus.CONFIRMED if count >= QUORUM else DisplayStatus.SCHEDULED
        canonical_time, tentative = record.primary_time, False

    return ReconciledView(
        game_id=record.id,
        canonical_time=canonical_time,
        status=status,
        tentative=tentative,
        owner_id=resolve_owner(participants),
        participant_count=count,
        vote_counts=tally.counts,
        stale_votes=tally.stale_votes,
        downgraded=downgraded,
    )


def write_intents(record: GameSnapshot, view: ReconciledView) -> dict:
    """
    Return the game columns that differ from the reconciled view.

    TENTATIVE_VOTING has no stored equivalent; it persists as
    ``status=scheduled, tentative=True``. A game with no participants is
    left alone: it is hidden from listings and removed by the sweep.
    """
    if not view.active:
        return {}

    stored_status = (
        GameStatus.CONFIRMED.value
        if view.status == DisplayStatus.CONFIRMED
        else GameStatus.SCHEDULED.value
    )

    intents = {}
    if record.status != stored_status:
        intents["status"] = stored_status
    if record.tentative != view.tentative:
        intents["tentative"] = view.tentative
    if record.primary_time != view.canonical_time:
        # Lock-in: the winner becomes primary and the old primary takes its
        # place among the alternatives
        intents["primary_time"] = view.canonical_time
        intents["candidate_times"] = [
            record.primary_time if t == view.canonical_time else t
            for t in decode_candidate_times(record.candidate_times)
            if t != record.primary_time
        ]
    return intents


def persist_view(
    store: "GameStore", record: GameSnapshot, view: ReconciledView, actor: str
) -> bool:
    """
    Attempt to write the reconciled view back to the store.

    Rejections and store failures are logged and swallowed. Returns True if
    the store now matches the view.
    """
    intents = write_intents(record, view)
    if not intents:
        return True

    try:
        store.update_game(record.id, intents, actor=actor)
    except StoreError as e:
        logger.warning(f"Skipped persisting reconciled state for game {record.id}: {e.kind}: {e}")
        return False

    logger.info(f"Persisted reconciled state for game {record.id}: {intents}")
    return True


def _duration(record: GameSnapshot) -> int:
    if record.duration_minutes is None or record.duration_minutes <= 0:
        return settings.default_duration_minutes
    return record.duration_minutes


def build_view(record: GameSnapshot, participants: list[ParticipantSnapshot]) -> GameView:
    """Reconcile a game and combine it with its display fields."""
    reconciled = reconcile(record, participants)

    players = [
        ParticipantView(
            user_id=p.user_id,
            display_name=p.display_name or PLACEHOLDER_NAME,
            avatar_url=p.avatar_url,
            voted_time=p.voted_time,
            status_note=p.status_note,
            joined_at=p.joined_at,
            is_owner=p.user_id == reconciled.owner_id,
        )
        for p in order_participants(participants)
    ]

    return GameView(
        id=record.id,
        game_date=record.game_date,
        duration_minutes=_duration(record),
        activity_type=record.activity_type,
        location=record.location,
        note=record.note,
        primary_time=record.primary_time,
        candidate_times=decode_candidate_times(record.candidate_times),
        participants=players,
        reconciled=reconciled,
    )
