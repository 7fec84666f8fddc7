from courtside.models.game import Game, GameStatus
from courtside.models.participant import Participant
from courtside.models.profile import Profile

__all__ = ["Game", "GameStatus", "Participant", "Profile"]
