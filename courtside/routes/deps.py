"""Shared route dependencies and error translation."""
from fastapi import Depends
from sqlmodel import Session

from courtside.core.database import get_session
from courtside.engine.orchestrator import SyncOrchestrator
from courtside.errors import (
    CourtsideError,
    GameNotFound,
    InvalidVote,
    NotGameOwner,
    NotSignedIn,
    StoreUnavailable,
    WriteRejected,
)
from courtside.store.games import GameStore

STATUS_CODES = {
    GameNotFound: 404,
    NotSignedIn: 401,
    NotGameOwner: 403,
    WriteRejected: 403,
    InvalidVote: 400,
    StoreUnavailable: 503,
}


def status_for(exc: CourtsideError) -> int:
    """HTTP status code for an application error."""
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


def get_store(session: Session = Depends(get_session)) -> GameStore:
    return GameStore(session)


def get_orchestrator(store: GameStore = Depends(get_store)) -> SyncOrchestrator:
    return SyncOrchestrator(store)
