"""Game routes: listing, hosting, joining, voting and leaving."""
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from courtside.auth import UserSession, get_optional_user_session, get_user_session
from courtside.engine.decode import candidate_list
from courtside.engine.orchestrator import SyncOrchestrator
from courtside.engine.types import GameChanges, GameDraft, GameView
from courtside.errors import GameNotFound, InvalidVote, NotGameOwner
from courtside.routes.deps import get_orchestrator

router = APIRouter(prefix="/games", tags=["games"])


class VoteRequest(BaseModel):
    voted_time: str | None = None


class NoteRequest(BaseModel):
    note: str | None = None


class ActionResult(BaseModel):
    """Outcome of leave and cancel.

    ``game`` is None when the game row was deleted. A game that still
    exists but has no participants is reported with ``removed=True`` too,
    since it no longer appears anywhere.
    """
    removed: bool
    game: GameView | None = None


def _check_vote(view: GameView, voted_time: str | None) -> None:
    """Reject votes for times that are not currently proposed."""
    if voted_time is None:
        return
    candidates = candidate_list(view.primary_time, view.candidate_times)
    if voted_time not in candidates:
        raise InvalidVote(f"{voted_time} is not one of {', '.join(candidates)}")


def _active_game(orchestrator: SyncOrchestrator, game_id: UUID) -> GameView:
    view = orchestrator.get_game(game_id)
    if not view.active:
        raise GameNotFound(f"Game {game_id} not found")
    return view


def _result(view: GameView | None) -> ActionResult:
    return ActionResult(removed=view is None or not view.active, game=view)


@router.get("", response_model=list[GameView])
async def list_games(orchestrator: SyncOrchestrator = Depends(get_orchestrator)):
    """
    List active games ordered by date and time.

    Status, time and host of every game are derived from its participants
    at read time. Games nobody is playing in are left out.
    """
    return orchestrator.list_games()


@router.post("", response_model=GameView, status_code=201)
async def create_game(
    draft: GameDraft,
    user: UserSession = Depends(get_user_session),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """
    Host a new game.

    The host joins automatically, voting for the primary time. Supplying
    alternative times opens a time vote.
    """
    return orchestrator.create_game(user, draft)


@router.get("/{game_id}", response_model=GameView)
async def game_detail(
    game_id: UUID,
    user: UserSession | None = Depends(get_optional_user_session),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Show one game. Signed-in readers also write back any drifted status."""
    view = orchestrator.get_game(game_id, session=user)
    if not view.active:
        raise GameNotFound(f"Game {game_id} not found")
    return view


@router.patch("/{game_id}", response_model=GameView)
async def edit_game(
    game_id: UUID,
    changes: GameChanges,
    user: UserSession = Depends(get_user_session),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """
    Edit game details. Host only.

    Sending ``candidate_times`` replaces the alternatives and restarts the
    time vote.
    """
    return orchestrator.edit_game(user, game_id, changes)


@router.post("/{game_id}/join", response_model=GameView)
async def join_game(
    game_id: UUID,
    vote: VoteRequest | None = None,
    user: UserSession = Depends(get_user_session),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Join a game, optionally voting for one of its proposed times."""
    voted_time = vote.voted_time if vote else None
    _check_vote(_active_game(orchestrator, game_id), voted_time)
    return orchestrator.join(user, game_id, voted_time)


@router.post("/{game_id}/vote", response_model=GameView)
async def change_vote(
    game_id: UUID,
    vote: VoteRequest,
    user: UserSession = Depends(get_user_session),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Change the caller's vote. Joins the game if not joined yet."""
    if not vote.voted_time:
        raise InvalidVote("voted_time is required")
    _check_vote(_active_game(orchestrator, game_id), vote.voted_time)
    return orchestrator.change_vote(user, game_id, vote.voted_time)


@router.post("/{game_id}/note", response_model=GameView)
async def update_note(
    game_id: UUID,
    body: NoteRequest,
    user: UserSession = Depends(get_user_session),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Set the caller's status note for this game."""
    return orchestrator.update_status_note(user, game_id, body.note)


@router.post("/{game_id}/leave", response_model=ActionResult)
async def leave_game(
    game_id: UUID,
    user: UserSession = Depends(get_user_session),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """
    Leave a game.

    When the host leaves, the next player to have joined becomes host. When
    the last player leaves, the game is cancelled.
    """
    return _result(orchestrator.leave(user, game_id))


@router.post("/{game_id}/cancel", response_model=ActionResult)
async def cancel_game(
    game_id: UUID,
    user: UserSession = Depends(get_user_session),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Cancel a game, removing every player. Host only."""
    view = _active_game(orchestrator, game_id)
    if view.reconciled.owner_id != user.require_user():
        raise NotGameOwner(f"Only the host can cancel game {game_id}")
    return _result(orchestrator.cancel(user, game_id))
