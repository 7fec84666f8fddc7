"""Drive game mutations end to end.

Every action follows the same path:

    1. Write the participant change. This is the only write whose failure
       is reported to the caller.
    2. Re-read the game and its full participant list from the store.
    3. Reconcile status and ownership from that snapshot.
    4. Try to persist the reconciled fields. Rejections are logged and
       ignored; the next read derives the same answer anyway.
    5. Return the reconciled view.

No locking is done between concurrent callers. Each one re-reads after its
own write, and because reconciliation is pure, any stale persisted status
is corrected by whoever reads next.
"""
import logging
from uuid import UUID

from courtside.auth import UserSession
from courtside.core.config import settings
from courtside.engine.decode import decode_candidate_times, normalize_candidate_times
from courtside.engine.ownership import LeaveKind, plan_leave, resolve_owner
from courtside.engine.reconciler import build_view, persist_view, reconcile, write_intents
from courtside.engine.types import QUORUM, DisplayStatus, GameChanges, GameDraft, GameView
from courtside.errors import InvalidVote, NotGameOwner, StoreError, StoreUnavailable, WriteRejected
from courtside.models import GameStatus
from courtside.store.games import GameStore
from courtside.store.policy import SERVICE_ACTOR

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Run user actions against a store and return reconciled views."""

    def __init__(self, store: GameStore):
        self.store = store

    def _refresh(self, game_id: UUID, actor: str) -> GameView:
        """Re-read a game, reconcile it and try to persist the result."""
        record, participants = self.store.fetch_game(game_id)
        view = build_view(record, participants)
        persist_view(self.store, record, view.reconciled, actor=actor)
        return view

    def _best_effort(self, game_id: UUID, fields: dict, actor: str, reason: str) -> bool:
        """Write derived game fields, logging instead of raising on failure."""
        try:
            self.store.update_game(game_id, fields, actor=actor)
        except StoreError as e:
            logger.warning(f"Skipped {reason} for game {game_id}: {e.kind}: {e}")
            return False
        logger.info(f"Applied {reason} for game {game_id}: {fields}")
        return True

    # Reads

    def get_game(self, game_id: UUID, session: UserSession | None = None) -> GameView:
        """
        Return the reconciled view of one game.

        With a session, the reconciled fields are also persisted on that
        user's behalf, best-effort.
        """
        if session is not None and session.active:
            return self._refresh(game_id, session.user_id)
        record, participants = self.store.fetch_game(game_id)
        return build_view(record, participants)

    def list_games(self) -> list[GameView]:
        """Return all active games ordered by date and time.

        Games without participants are left out, whether or not their row
        has been deleted yet.
        """
        return [
            build_view(record, participants)
            for record, participants in self.store.fetch_games()
            if participants
        ]

    # Mutations

    def create_game(self, session: UserSession, draft: GameDraft) -> GameView:
        """Create a game with the creator as its only participant."""
        user_id = session.require_user()
        candidates = normalize_candidate_times(
            draft.primary_time, draft.candidate_times, settings.max_candidate_times
        )

        record = self.store.insert_game(draft, candidates, actor=user_id)
        self.store.upsert_participant(record.id, user_id, draft.primary_time, actor=user_id)

        return self._refresh(record.id, user_id)

    def join(self, session: UserSession, game_id: UUID, voted_time: str | None = None) -> GameView:
        """
        Join a game, or update the vote if already joined.

        Without a vote the player votes for the primary time. Raises
        StoreError subclasses unchanged if the participant write fails.
        """
        user_id = session.require_user()
        if voted_time is None:
            record, _ = self.store.fetch_game(game_id)
            voted_time = record.primary_time
        created = self.store.upsert_participant(game_id, user_id, voted_time, actor=user_id)
        if created:
            logger.info(f"{user_id} joined game {game_id} voting {voted_time}")
        else:
            logger.info(f"{user_id} re-joined game {game_id}, vote now {voted_time}")
        return self._refresh(game_id, user_id)

    def change_vote(self, session: UserSession, game_id: UUID, voted_time: str) -> GameView:
        """
        Change the caller's vote.

        The vote is normally checked against the candidate times by the
        caller. If the candidates changed in the meantime the vote is still
        written and counted as stale by the reconciler.
        """
        if not voted_time:
            raise InvalidVote("A vote needs a time")
        return self.join(session, game_id, voted_time)

    def update_status_note(self, session: UserSession, game_id: UUID, note: str | None) -> GameView:
        """Update the caller's free-text note. Has no effect on scheduling."""
        user_id = session.require_user()
        self.store.update_participant_note(game_id, user_id, note, actor=user_id)
        return self._refresh(game_id, user_id)

    def edit_game(self, session: UserSession, game_id: UUID, changes: GameChanges) -> GameView:
        """
        Apply a host edit.

        Only the current owner may edit. Replacing the candidate times
        reopens the vote: ``tentative`` is re-derived from the new list.
        A rejected edit is reported to the caller.
        """
        user_id = session.require_user()
        record, participants = self.store.fetch_game(game_id)
        if resolve_owner(participants) != user_id:
            raise NotGameOwner(f"Only the host can edit game {game_id}")

        fields = changes.model_dump(exclude_none=True)
        if changes.duration_minutes is not None and changes.duration_minutes <= 0:
            fields.pop("duration_minutes")

        primary_time = changes.primary_time or record.primary_time
        if changes.candidate_times is not None:
            candidates = normalize_candidate_times(
                primary_time, changes.candidate_times, settings.max_candidate_times
            )
            fields["candidate_times"] = candidates
            fields["tentative"] = bool(candidates)
        elif changes.primary_time is not None:
            # Keep the primary time out of the alternatives
            current = decode_candidate_times(record.candidate_times)
            fields["candidate_times"] = normalize_candidate_times(
                primary_time, current, settings.max_candidate_times
            )

        if fields:
            self.store.update_game(game_id, fields, actor=user_id)
            logger.info(f"{user_id} edited game {game_id}: {sorted(fields)}")

        return self._refresh(game_id, user_id)

    def leave(self, session: UserSession, game_id: UUID) -> GameView | None:
        """
        Leave a game.

        If the departure drops a confirmed game below quorum, the downgrade
        is written first. If the owner leaves, ownership passes to the next
        earliest joiner; if the owner was the last participant the game is
        cancelled instead. Returns None when the game row was deleted.
        """
        user_id = session.require_user()
        record, participants = self.store.fetch_game(game_id)
        plan = plan_leave(participants, user_id)

        if plan.kind == LeaveKind.NOT_PARTICIPANT:
            logger.info(f"{user_id} is not in game {game_id}, nothing to leave")
            return build_view(record, participants)

        if plan.kind == LeaveKind.CASCADE:
            logger.info(f"Last participant {user_id} left game {game_id}, cancelling")
            return self.cancel(session, game_id)

        current = reconcile(record, participants)
        if current.status == DisplayStatus.CONFIRMED and plan.remaining < QUORUM:
            self._best_effort(
                game_id, {"status": GameStatus.SCHEDULED.value}, user_id, "downgrade"
            )

        if plan.kind == LeaveKind.TRANSFER:
            self._best_effort(
                game_id,
                {"host_id": plan.successor_id},
                user_id,
                f"host transfer to {plan.successor_id}",
            )

        self.store.delete_participant(game_id, user_id, actor=user_id)
        logger.info(f"{user_id} left game {game_id}")

        return self._refresh(game_id, user_id)

    def cancel(self, session: UserSession, game_id: UUID) -> GameView | None:
        """
        Remove every participant, then the game.

        Participant rows the caller may not delete are skipped, and a
        rejected game deletion is tolerated: a game left without
        participants is excluded from listings regardless. Returns None if
        the game row is gone, otherwise its (possibly inactive) view.
        """
        user_id = session.require_user()
        removed = self.store.delete_participants(game_id, actor=user_id)
        logger.info(f"{user_id} cancelled game {game_id}, removed {removed} participants")

        try:
            self.store.delete_game(game_id, actor=user_id)
        except (WriteRejected, StoreUnavailable) as e:
            logger.warning(
                f"Game {game_id} row kept after cancel ({e.kind}: {e}); "
                "it is hidden once no participants remain"
            )
            record, participants = self.store.fetch_game(game_id)
            return build_view(record, participants)

        return None

    # Background

    def reconcile_all(self, actor: str = SERVICE_ACTOR) -> dict:
        """
        Reconcile every game and persist the results.

        Returns dict with sweep statistics.
        """
        stats = {"checked": 0, "persisted": 0, "in_sync": 0, "failed": 0, "purged": 0}

        for record, participants in self.store.fetch_games():
            if not participants:
                continue
            stats["checked"] += 1
            view = reconcile(record, participants)
            if view.downgraded:
                logger.info(f"Game {record.id} stored as confirmed with {view.participant_count} players")

            intents = write_intents(record, view)
            if view.owner_id and record.host_id != view.owner_id:
                intents["host_id"] = view.owner_id

            if not intents:
                stats["in_sync"] += 1
            elif self._best_effort(record.id, intents, actor, "sweep repair"):
                stats["persisted"] += 1
            else:
                stats["failed"] += 1

        stats["purged"] = self.store.purge_empty_games(actor=actor)
        logger.info(f"Reconcile sweep completed: {stats}")
        return stats
