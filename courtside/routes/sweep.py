"""Routes for triggering and inspecting the reconcile sweep."""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from courtside.core.config import settings
from courtside.core.database import get_session
from courtside.core.scheduler import run_sweep, scheduler

router = APIRouter(prefix="/sweep", tags=["sweep"])


@router.post("/now")
async def trigger_sweep(session: Session = Depends(get_session)):
    """
    Run the reconcile sweep immediately.

    Reconciles every game with service privileges, writes any drifted
    status, tentative flag, time or host back to the store, and removes
    games without participants. Returns the sweep statistics.
    """
    return run_sweep(session)


@router.get("/status")
async def sweep_status():
    """Report sweep configuration and whether the scheduler is running."""
    return {
        "enabled": settings.sweep_enabled,
        "running": scheduler.running,
        "interval_minutes": settings.sweep_interval_minutes,
    }
