"""Session status routes."""
from fastapi import APIRouter, Depends

from courtside.auth import UserSession, get_optional_user_session

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/session")
async def session_status(user: UserSession | None = Depends(get_optional_user_session)):
    """
    Report who the request is signed in as.

    Requests without an ``X-User-Id`` header are anonymous: they can list
    and view games but cannot join, vote or host.
    """
    if user is None:
        return {"signed_in": False, "user_id": None, "display_name": None}
    return {"signed_in": user.active, "user_id": user.user_id, "display_name": user.display_name}
