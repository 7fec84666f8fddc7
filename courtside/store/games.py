"""SQL-backed store for games, participants and profiles.

The store hands the engine detached snapshots and accepts single-row
writes. Each write commits on its own; there is no transaction spanning a
participant write and a game write, so a caller can never assume both
landed together.
"""
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from courtside.core.config import settings
from courtside.engine.decode import encode_candidate_times
from courtside.engine.types import GameDraft, GameSnapshot, ParticipantSnapshot
from courtside.errors import GameNotFound, StoreError, StoreUnavailable, WriteRejected
from courtside.models import Game, GameStatus, Participant, Profile
from courtside.store.policy import SERVICE_ACTOR, WritePolicy

logger = logging.getLogger(__name__)

# Game columns that update_game accepts
GAME_FIELDS = {
    "game_date",
    "primary_time",
    "duration_minutes",
    "activity_type",
    "location",
    "note",
    "candidate_times",
    "tentative",
    "status",
    "host_id",
}


def _game_snapshot(game: Game) -> GameSnapshot:
    return GameSnapshot(
        id=game.id,
        game_date=game.game_date,
        primary_time=game.primary_time,
        duration_minutes=game.duration_minutes,
        activity_type=game.activity_type,
        location=game.location,
        note=game.note,
        candidate_times=game.candidate_times,
        tentative=game.tentative,
        status=game.status,
        host_id=game.host_id,
    )


def _participant_snapshot(participant: Participant, profile: Profile | None) -> ParticipantSnapshot:
    return ParticipantSnapshot(
        user_id=participant.user_id,
        joined_at=participant.joined_at,
        voted_time=participant.voted_time,
        status_note=participant.status_note,
        display_name=profile.display_name if profile else None,
        avatar_url=profile.avatar_url if profile else None,
    )


class GameStore:
    """Read and write games through a database session."""

    def __init__(self, session: Session, policy: WritePolicy | None = None):
        self.session = session
        self.policy = policy or WritePolicy(enforce=settings.enforce_write_policy)

    @contextmanager
    def _reading(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"Store read failed ({action}): {e}")
            raise StoreUnavailable(f"{action} failed: {e}") from e

    @contextmanager
    def _writing(self, action: str) -> Iterator[None]:
        """Commit on success; roll back and raise StoreUnavailable on failure."""
        try:
            yield
            self.session.commit()
        except StoreError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Store write failed ({action}): {e}")
            raise StoreUnavailable(f"{action} failed: {e}") from e

    def _get_game(self, game_id: UUID) -> Game:
        game = self.session.get(Game, game_id)
        if not game:
            raise GameNotFound(f"Game {game_id} not found")
        return game

    def _participants(self, game_id: UUID) -> list[Participant]:
        statement = select(Participant).where(Participant.game_id == game_id)
        return list(self.session.exec(statement).all())

    def _snapshot_participants(self, participants: list[Participant]) -> list[ParticipantSnapshot]:
        user_ids = {p.user_id for p in participants}
        profiles = {}
        if user_ids:
            statement = select(Profile).where(Profile.user_id.in_(sorted(user_ids)))
            profiles = {profile.user_id: profile for profile in self.session.exec(statement).all()}
        return [_participant_snapshot(p, profiles.get(p.user_id)) for p in participants]

    # Reads

    def fetch_game(self, game_id: UUID) -> tuple[GameSnapshot, list[ParticipantSnapshot]]:
        """
        Fetch one game and its full participant list.

        Cached rows are expired first so the result reflects everything
        committed so far, including writes by other sessions.
        """
        with self._reading("fetch_game"):
            self.session.expire_all()
            game = self._get_game(game_id)
            participants = self._participants(game_id)
            return _game_snapshot(game), self._snapshot_participants(participants)

    def fetch_games(self) -> list[tuple[GameSnapshot, list[ParticipantSnapshot]]]:
        """Fetch every game with its participants, ordered by date and time."""
        with self._reading("fetch_games"):
            self.session.expire_all()
            statement = select(Game).order_by(Game.game_date, Game.primary_time)
            games = self.session.exec(statement).all()

            result = []
            for game in games:
                participants = self._snapshot_participants(self._participants(game.id))
                result.append((_game_snapshot(game), participants))
            return result

    def get_profile(self, user_id: str) -> Profile | None:
        with self._reading("get_profile"):
            return self.session.get(Profile, user_id)

    # Game writes

    def insert_game(self, draft: GameDraft, candidate_times: list[str], actor: str) -> GameSnapshot:
        """Create a game hosted by ``actor``."""
        game = Game(
            game_date=draft.game_date,
            primary_time=draft.primary_time,
            duration_minutes=draft.duration_minutes,
            activity_type=draft.activity_type,
            location=draft.location,
            note=draft.note,
            candidate_times=encode_candidate_times(candidate_times),
            tentative=bool(candidate_times),
            status=GameStatus.SCHEDULED.value,
            host_id=actor,
        )
        with self._writing("insert_game"):
            self.session.add(game)
        self.session.refresh(game)
        logger.info(f"Created game {game.id} hosted by {actor}")
        return _game_snapshot(game)

    def update_game(self, game_id: UUID, fields: dict, actor: str) -> None:
        """
        Update columns of one game row.

        Raises:
            GameNotFound: The game does not exist.
            WriteRejected: The policy does not allow ``actor`` to write it.
            StoreUnavailable: The database write failed.
        """
        unknown = set(fields) - GAME_FIELDS
        if unknown:
            raise ValueError(f"Unknown game fields: {sorted(unknown)}")

        with self._writing("update_game"):
            game = self._get_game(game_id)
            self.policy.check_game_write(game, actor)

            for name, value in fields.items():
                if name == "candidate_times" and isinstance(value, list):
                    value = encode_candidate_times(value)
                setattr(game, name, value)
            game.updated_at = datetime.now(UTC)
            self.session.add(game)

    def delete_game(self, game_id: UUID, actor: str) -> None:
        """
        Delete a game row.

        Raises WriteRejected if participant rows still reference the game,
        which happens when some of them could not be deleted.
        """
        with self._writing("delete_game"):
            game = self._get_game(game_id)
            self.policy.check_game_write(game, actor)
            if self._participants(game_id):
                raise WriteRejected(f"Game {game_id} still has participants")
            self.session.delete(game)
        logger.info(f"Deleted game {game_id}")

    def purge_empty_games(self, actor: str = SERVICE_ACTOR) -> int:
        """Hard-delete games that have no participants left."""
        deleted = 0
        with self._writing("purge_empty_games"):
            for game in self.session.exec(select(Game)).all():
                if self._participants(game.id):
                    continue
                if not self.policy.can_write_game(game, actor):
                    continue
                logger.info(f"Purging abandoned game {game.id}")
                self.session.delete(game)
                deleted += 1
        return deleted

    # Participant writes

    def upsert_participant(
        self, game_id: UUID, user_id: str, voted_time: str | None, actor: str
    ) -> bool:
        """
        Insert a participant, or update the vote of an existing one.

        Returns True if a new row was created.
        """
        with self._writing("upsert_participant"):
            game = self._get_game(game_id)
            self.policy.check_participant_write(game, user_id, actor)

            participant = self.session.get(Participant, (game_id, user_id))
            created = participant is None
            if created:
                participant = Participant(game_id=game_id, user_id=user_id, voted_time=voted_time)
            else:
                participant.voted_time = voted_time
            self.session.add(participant)
        return created

    def update_participant_note(
        self, game_id: UUID, user_id: str, note: str | None, actor: str
    ) -> None:
        with self._writing("update_participant_note"):
            game = self._get_game(game_id)
            self.policy.check_participant_write(game, user_id, actor)

            participant = self.session.get(Participant, (game_id, user_id))
            if participant is None:
                raise WriteRejected(f"{user_id} has not joined game {game_id}")
            participant.status_note = note
            self.session.add(participant)

    def delete_participant(self, game_id: UUID, user_id: str, actor: str) -> bool:
        """Delete one participant row. Returns False if there was none."""
        with self._writing("delete_participant"):
            game = self._get_game(game_id)
            if not self.policy.can_delete_participant(game, user_id, actor):
                raise WriteRejected(f"{actor} may not remove {user_id} from game {game_id}")

            participant = self.session.get(Participant, (game_id, user_id))
            if participant is None:
                return False
            self.session.delete(participant)
        return True

    def delete_participants(self, game_id: UUID, actor: str) -> int:
        """
        Delete every participant row ``actor`` is allowed to delete.

        Rows the policy protects are skipped silently, so the game may keep
        some participants. Returns the number of rows deleted.
        """
        deleted = 0
        with self._writing("delete_participants"):
            game = self._get_game(game_id)
            for participant in self._participants(game_id):
                if not self.policy.can_delete_participant(game, participant.user_id, actor):
                    continue
                self.session.delete(participant)
                deleted += 1
        return deleted

    # Profiles

    def upsert_profile(
        self,
        user_id: str,
        actor: str,
        display_name: str | None = None,
        phone: str | None = None,
        avatar_url: str | None = None,
    ) -> Profile:
        """Create or update a profile. Only the profile's owner may write it."""
        if not self.policy.can_write_participant(user_id, actor):
            raise WriteRejected(f"{actor} may not modify profile {user_id}")

        with self._writing("upsert_profile"):
            profile = self.session.get(Profile, user_id) or Profile(user_id=user_id)
            if display_name is not None:
                profile.display_name = display_name
            if phone is not None:
                profile.phone = phone
            if avatar_url is not None:
                profile.avatar_url = avatar_url
            profile.updated_at = datetime.now(UTC)
            self.session.add(profile)
        self.session.refresh(profile)
        return profile
