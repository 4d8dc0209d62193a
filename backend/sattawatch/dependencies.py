"""FastAPI dependency injection providers."""

from fastapi import HTTPException, Request, status

from sattawatch.scrapers.scheduler import UpdateScheduler
from sattawatch.services.result_store import ResultStore


def get_update_scheduler(request: Request) -> UpdateScheduler:
    """Return the process-wide UpdateScheduler created at startup.

    Usage:
        @router.get("/status")
        async def status(scheduler: UpdateScheduler = Depends(get_update_scheduler)):
            snapshot = await scheduler.get_state()
    """
    scheduler = getattr(request.app.state, "update_scheduler", None)
    if scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Update scheduler is not initialised",
        )
    return scheduler


def get_result_store(request: Request) -> ResultStore:
    """Return the ResultStore created at startup."""
    store = getattr(request.app.state, "result_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Result store is not initialised",
        )
    return store
