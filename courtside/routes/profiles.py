"""Profile routes for the signed-in player."""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from courtside.auth import UserSession, get_user_session
from courtside.routes.deps import get_store
from courtside.store.games import GameStore

router = APIRouter(prefix="/profiles", tags=["profiles"])


class ProfileUpdate(BaseModel):
    display_name: str | None = None
    phone: str | None = None
    avatar_url: str | None = None


def _profile_dict(profile) -> dict:
    return {
        "user_id": profile.user_id,
        "display_name": profile.display_name,
        "phone": profile.phone,
        "avatar_url": profile.avatar_url,
    }


@router.get("/me")
async def my_profile(
    user: UserSession = Depends(get_user_session),
    store: GameStore = Depends(get_store),
):
    """Return the signed-in player's profile."""
    profile = store.get_profile(user.require_user())
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return _profile_dict(profile)


@router.put("/me")
async def update_my_profile(
    update: ProfileUpdate,
    user: UserSession = Depends(get_user_session),
    store: GameStore = Depends(get_store),
):
    """
    Create or update the signed-in player's profile.

    Only fields present in the request are changed. A blank display name
    is ignored so players never end up without a name.
    """
    display_name = update.display_name.strip() if update.display_name else None
    user_id = user.require_user()
    profile = store.upsert_profile(
        user_id,
        actor=user_id,
        display_name=display_name or None,
        phone=update.phone,
        avatar_url=update.avatar_url,
    )
    return _profile_dict(profile)
