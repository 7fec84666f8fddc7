"""Row-level write policy for games and participants.

Mirrors the rules a hosted database would enforce on behalf of the
application, which the client cannot inspect ahead of time:

    - A game row may only be updated or deleted by its stored host.
    - A participant row may only be written by the player it belongs to.
    - A participant row may be deleted by its player or by the stored host.

The service actor, used by the background sweep, bypasses every rule.
Because the stored host is advisory and may lag behind the real owner,
writes of derived fields are routinely rejected; callers treat that as an
expected outcome.
"""
import logging

from courtside.errors import WriteRejected
from courtside.models import Game

logger = logging.getLogger(__name__)

SERVICE_ACTOR = "service"


class WritePolicy:
    """Decide whether an actor may write a row."""

    def __init__(self, enforce: bool = True):
        self.enforce = enforce

    def _privileged(self, actor: str) -> bool:
        return not self.enforce or actor == SERVICE_ACTOR

    def can_write_game(self, game: Game, actor: str) -> bool:
        if self._privileged(actor):
            return True
        return game.host_id is not None and game.host_id == actor

    def can_write_participant(self, user_id: str, actor: str) -> bool:
        return self._privileged(actor) or user_id == actor

    def can_delete_participant(self, game: Game, user_id: str, actor: str) -> bool:
        return self.can_write_participant(user_id, actor) or self.can_write_game(game, actor)

    def check_game_write(self, game: Game, actor: str) -> None:
        """Raise WriteRejected unless ``actor`` may write ``game``."""
        if not self.can_write_game(game, actor):
            logger.debug(f"Policy rejected game write on {game.id} by {actor}")
            raise WriteRejected(f"{actor} may not modify game {game.id}")

    def check_participant_write(self, game: Game, user_id: str, actor: str) -> None:
        """Raise WriteRejected unless ``actor`` may write ``user_id``'s row."""
        if not self.can_write_participant(user_id, actor):
            logger.debug(f"Policy rejected participant write on {game.id}/{user_id} by {actor}")
            raise WriteRejected(f"{actor} may not modify participant {user_id}")
