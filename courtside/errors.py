"""Exceptions raised by the store and the orchestrator.

Every exception carries a short machine-readable ``kind`` next to its
message so that callers can surface both verbatim.
"""


class CourtsideError(Exception):
    """Base class for all application errors."""

    kind = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class StoreError(CourtsideError):
    """A store read or write did not succeed."""

    kind = "store_error"


class WriteRejected(StoreError):
    """The write policy refused the write.

    Expected during normal operation for derived fields (status, host):
    only the stored host may write the game row.
    """

    kind = "write_rejected"


class StoreUnavailable(StoreError):
    """The database could not be reached or the statement failed."""

    kind = "store_unavailable"


class GameNotFound(StoreError):
    kind = "game_not_found"


class NotSignedIn(CourtsideError):
    """An action was attempted with a missing or invalidated session."""

    kind = "not_signed_in"


class NotGameOwner(CourtsideError):
    kind = "not_game_owner"


class InvalidVote(CourtsideError):
    """A vote names a time that is not among the game's candidates."""

    kind = "invalid_vote"
