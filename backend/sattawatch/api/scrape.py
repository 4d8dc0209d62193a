"""Scrape trigger and history endpoints."""

from typing import List

import structlog
from fastapi import APIRouter, Depends

from sattawatch.config import settings
from sattawatch.dependencies import get_result_store, get_update_scheduler
from sattawatch.schemas import ApiResponse, ScrapeRunResponse
from sattawatch.scrapers.scheduler import UpdateScheduler
from sattawatch.services.result_store import ResultStore

router = APIRouter()
logger = structlog.get_logger(__name__)

MAX_HISTORY_RUNS = 10


@router.get("/scrape", response_model=ApiResponse[ScrapeRunResponse])
async def scrape(scheduler: UpdateScheduler = Depends(get_update_scheduler)):
    """Run a scrape now and return the stored run.

    If a scheduled run is already in progress, waits for it and returns
    its result instead of starting a second browser.
    """
    logger.info("on_demand_scrape_requested")
    run = await scheduler.trigger("on_demand")
    snapshot = await scheduler.get_state()
    return ApiResponse(
        data=ScrapeRunResponse.from_run(run),
        last_update=snapshot.last_update,
        next_update=snapshot.next_update,
    )


@router.get("/history", response_model=ApiResponse[List[ScrapeRunResponse]])
async def history(
    store: ResultStore = Depends(get_result_store),
    scheduler: UpdateScheduler = Depends(get_update_scheduler),
):
    """Return the most recent runs, newest first."""
    runs = await store.list_recent(limit=min(settings.HISTORY_LIMIT, MAX_HISTORY_RUNS))
    snapshot = await scheduler.get_state()
    return ApiResponse(
        data=[ScrapeRunResponse.from_run(run) for run in runs],
        last_update=snapshot.last_update,
        next_update=snapshot.next_update,
    )
