"""Explicit user session handle.

There is no process-wide "current user". A ``UserSession`` is acquired when
a user signs in, invalidated when they sign out, and passed into every
orchestrator call. The HTTP layer builds one per request.
"""
import logging

from fastapi import Depends, Header, HTTPException
from sqlmodel import Session

from courtside.core.database import get_session
from courtside.errors import NotSignedIn, StoreError
from courtside.store.games import GameStore

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "New Player"


class UserSession:
    """The signed-in user an action is performed for."""

    def __init__(self, user_id: str, display_name: str | None = None):
        if not user_id:
            raise NotSignedIn("A user id is required to sign in")
        self.user_id = user_id
        self.display_name = display_name or DEFAULT_DISPLAY_NAME
        self.active = True

    def invalidate(self) -> None:
        """Sign out. Further actions with this session raise NotSignedIn."""
        self.active = False

    def require_user(self) -> str:
        """Return the user id, or raise NotSignedIn if signed out."""
        if not self.active:
            raise NotSignedIn(f"Session for {self.user_id} has been signed out")
        return self.user_id

    def __repr__(self) -> str:
        state = "active" if self.active else "signed out"
        return f"UserSession({self.user_id!r}, {state})"


def sign_in(store: GameStore, user_id: str) -> UserSession:
    """
    Open a session for ``user_id``.

    New users get a default profile so they show up by name once they join
    a game. Failing to create it is not fatal; the player is then shown
    with a placeholder name.
    """
    profile = store.get_profile(user_id)
    if profile is None:
        try:
            profile = store.upsert_profile(
                user_id, actor=user_id, display_name=DEFAULT_DISPLAY_NAME
            )
        except StoreError as e:
            logger.warning(f"Could not auto-create profile for {user_id}: {e}")
            return UserSession(user_id)
    return UserSession(user_id, profile.display_name)


def get_user_session(
    x_user_id: str | None = Header(default=None),
    session: Session = Depends(get_session),
) -> UserSession:
    """Dependency resolving the ``X-User-Id`` header to a session."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Sign in required")
    return sign_in(GameStore(session), x_user_id)


def get_optional_user_session(
    x_user_id: str | None = Header(default=None),
    session: Session = Depends(get_session),
) -> UserSession | None:
    """Like get_user_session, but anonymous requests resolve to None."""
    if not x_user_id:
        return None
    return sign_in(GameStore(session), x_user_id)
