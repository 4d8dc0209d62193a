"""Health check and update status endpoints."""

from fastapi import APIRouter, Depends

from sattawatch.dependencies import get_update_scheduler
from sattawatch.schemas import HealthCheckResponse, UpdateStatusResponse
from sattawatch.scrapers.scheduler import UpdateScheduler

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(scheduler: UpdateScheduler = Depends(get_update_scheduler)):
    """Return liveness plus the last and next update times."""
    snapshot = await scheduler.get_state()
    return HealthCheckResponse(
        last_update=snapshot.last_update,
        next_update=snapshot.next_update,
    )


@router.get("/status", response_model=UpdateStatusResponse)
async def update_status(scheduler: UpdateScheduler = Depends(get_update_scheduler)):
    """Return update timing, the configured interval and the last error.

    Both timestamps are null until the first run resolves. next_update is
    only acted on while scheduler_running is true; with the timer off
    (test environment, shutdown) runs happen through /scrape alone.
    """
    snapshot = await scheduler.get_state()
    return UpdateStatusResponse(
        last_update=snapshot.last_update,
        next_update=snapshot.next_update,
        update_interval_hours=snapshot.update_interval_hours,
        running=snapshot.running,
        scheduler_running=scheduler.is_running(),
        last_error=snapshot.last_error,
        consecutive_failures=snapshot.consecutive_failures,
    )
