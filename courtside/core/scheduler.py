"""Background job scheduler for the reconcile sweep."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session

from courtside.core.config import settings
from courtside.core.database import engine
from courtside.engine.orchestrator import SyncOrchestrator
from courtside.store.games import GameStore
from courtside.store.policy import SERVICE_ACTOR

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def run_sweep(session: Session) -> dict:
    """Reconcile every game with service privileges and purge empty ones."""
    orchestrator = SyncOrchestrator(GameStore(session))
    return orchestrator.reconcile_all(actor=SERVICE_ACTOR)


def sweep_job():
    """Background reconcile job."""
    try:
        with Session(engine) as session:
            stats = run_sweep(session)
            logger.info(f"Background sweep completed: {stats}")
    except Exception as e:
        logger.error(f"Background sweep failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    if not settings.sweep_enabled:
        logger.info("Reconcile sweep disabled")
        return

    scheduler.add_job(
        sweep_job,
        trigger=IntervalTrigger(minutes=settings.sweep_interval_minutes),
        id="reconcile_sweep",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, reconciling every {settings.sweep_interval_minutes} minutes"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")
