"""APScheduler-based update scheduler.

This module owns the recurring scrape cadence. It runs the scrape
pipeline every update interval, retries after a short delay when a run
fails, and shares a single "run slot" with on-demand requests so that at
most one scrape (and one browser) is active at any time.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from sattawatch.core.exceptions import BrowserLaunchError
from sattawatch.scrapers.base import ScrapeRun
from sattawatch.scrapers.scraper_service import ScraperService, utcnow
from sattawatch.scrapers.state import SchedulerSnapshot, SchedulerState

logger = structlog.get_logger(__name__)

INTERVAL_JOB_ID = "scheduled_update"
RETRY_JOB_ID = "retry_update"

DEFAULT_UPDATE_INTERVAL = timedelta(hours=6)
DEFAULT_RETRY_DELAY = timedelta(minutes=5)


class UpdateScheduler:
    """Manages periodic scrape runs and the shared timing state.

    This scheduler:
    - Fires a scrape on a fixed interval, once immediately at startup
    - Schedules a one-shot retry after a failed run (never stacked)
    - Lets on-demand callers join the in-flight run instead of starting another
    - Survives any number of consecutive failures
    """

    def __init__(
        self,
        scraper_service: ScraperService,
        update_interval: timedelta = DEFAULT_UPDATE_INTERVAL,
        retry_delay: timedelta = DEFAULT_RETRY_DELAY,
        max_consecutive_retries: int = 0,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize update scheduler.

        Args:
            scraper_service: Pipeline to run for each update
            update_interval: Cadence after a successful run
            retry_delay: Delay before retrying a failed run
            max_consecutive_retries: Fast retries allowed in a row before
                falling back to the regular interval (0 = unlimited)
            clock: Source of the current UTC time
        """
        if update_interval <= timedelta(0) or retry_delay <= timedelta(0):
            raise ValueError("update_interval and retry_delay must be positive")
        self.scraper_service = scraper_service
        self.update_interval = update_interval
        self.retry_delay = retry_delay
        self.max_consecutive_retries = max_consecutive_retries
        self.clock = clock
        self.state = SchedulerState(update_interval)
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.logger = logger.bind(service="update_scheduler")

        self._slot_lock = asyncio.Lock()
        self._inflight: Optional[asyncio.Task] = None

    def start(self, run_on_startup: bool = True) -> None:
        """Start the recurring update timer.

        Args:
            run_on_startup: Fire the first update immediately instead of
                waiting one full interval
        """
        if self.scheduler.running:
            self.logger.warning("scheduler_already_running")
            return

        job_kwargs = {}
        if run_on_startup:
            job_kwargs["next_run_time"] = self.clock()

        self.scheduler.add_job(
            func=self._run_scheduled,
            trigger=IntervalTrigger(
                seconds=self.update_interval.total_seconds(),
                timezone="UTC",
            ),
            args=["interval"],
            id=INTERVAL_JOB_ID,
            name="Scheduled result update",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **job_kwargs,
        )
        self.scheduler.start()
        self.logger.info(
            "scheduler_started",
            update_interval_hours=self.update_interval.total_seconds() / 3600,
            retry_delay_minutes=self.retry_delay.total_seconds() / 60,
            run_on_startup=run_on_startup,
        )

    async def shutdown(self) -> None:
        """Stop the timer and let any in-flight run finish.

        The in-flight run is awaited, not cancelled, so its browser
        session is always closed cleanly.
        """
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.logger.info("scheduler_stopped")

        task = self._inflight
        if task is not None and not task.done():
            self.logger.info("waiting_for_inflight_run")
            await asyncio.wait([task])

    def is_running(self) -> bool:
        """Check if the timer is active."""
        return self.scheduler.running

    def has_inflight_run(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def get_state(self) -> SchedulerSnapshot:
        """Consistent snapshot of last/next update timing."""
        return await self.state.snapshot()

    async def trigger(self, reason: str = "on_demand") -> ScrapeRun:
        """Run an update now, or join the one already in flight.

        Callers arriving while a run is in flight wait for that run and
        receive its result (or its exception). A caller giving up, e.g. a
        disconnected HTTP client, does not cancel the shared run.

        Args:
            reason: Label for logs ("on_demand", "interval", "retry")

        Returns:
            The completed ScrapeRun

        Raises:
            Whatever the scrape pipeline raised
        """
        async with self._slot_lock:
            task = self._inflight
            joined = task is not None and not task.done()
            if not joined:
                task = asyncio.create_task(self._execute(reason), name=f"scrape-run-{reason}")
                task.add_done_callback(self._consume_outcome)
                self._inflight = task

        if joined:
            self.logger.info("joined_inflight_run", trigger=reason)
        return await asyncio.shield(task)

    @staticmethod
    def _consume_outcome(task: asyncio.Task) -> None:
        # Every waiter may have gone away; failures are logged in _handle_failure
        if not task.cancelled():
            task.exception()

    async def _run_scheduled(self, reason: str) -> None:
        """Entry point for APScheduler jobs.

        Catches all exceptions so a failing run never kills the timer.
        """
        try:
            await self.trigger(reason)
        except Exception as e:
            snapshot = await self.state.snapshot()
            self.logger.error(
                "scheduled_update_failed",
                trigger=reason,
                error=str(e),
                next_update=snapshot.next_update.isoformat() if snapshot.next_update else None,
            )

    async def _execute(self, reason: str) -> ScrapeRun:
        await self.state.mark_running()
        self.logger.info("update_started", trigger=reason)
        try:
            run = await self.scraper_service.run_once()
        except asyncio.CancelledError:
            await self.state.mark_idle()
            raise
        except Exception as e:
            await self._handle_failure(e, reason)
            raise
        await self._handle_success(run, reason)
        return run

    async def _handle_success(self, run: ScrapeRun, reason: str) -> None:
        snapshot = await self.state.record_success(self.clock())
        self._remove_retry_job()
        self._realign_interval_job(snapshot.next_update)
        self.logger.info(
            "update_completed",
            trigger=reason,
            run_id=run.run_id,
            result_count=run.result_count,
            last_update=snapshot.last_update.isoformat(),
            next_update=snapshot.next_update.isoformat(),
        )

    async def _handle_failure(self, error: Exception, reason: str) -> None:
        now = self.clock()
        previous = await self.state.snapshot()
        failures = previous.consecutive_failures + 1

        fast_retry = True
        if isinstance(error, BrowserLaunchError):
            # Configuration problem; hammering it every few minutes won't help
            fast_retry = False
        elif self.max_consecutive_retries and failures > self.max_consecutive_retries:
            fast_retry = False
            self.logger.error(
                "retry_budget_exhausted",
                consecutive_failures=failures,
                max_consecutive_retries=self.max_consecutive_retries,
            )

        next_update = now + (self.retry_delay if fast_retry else self.update_interval)
        snapshot = await self.state.record_failure(now, next_update, str(error))

        if fast_retry:
            self._schedule_retry(next_update)
        else:
            self._remove_retry_job()
            self._realign_interval_job(next_update)

        self.logger.error(
            "update_failed",
            trigger=reason,
            error_type=type(error).__name__,
            error=str(error),
            consecutive_failures=snapshot.consecutive_failures,
            fast_retry=fast_retry,
            next_update=next_update.isoformat(),
        )

    def _schedule_retry(self, run_at: datetime) -> None:
        if not self.scheduler.running:
            self.logger.warning("retry_not_scheduled", reason="scheduler_not_running")
            return
        # replace_existing keeps at most one pending retry
        self.scheduler.add_job(
            func=self._run_scheduled,
            trigger=DateTrigger(run_date=run_at, timezone="UTC"),
            args=["retry"],
            id=RETRY_JOB_ID,
            name="Retry failed update",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=None,
        )
        self.logger.info("retry_scheduled", run_at=run_at.isoformat())

    def _remove_retry_job(self) -> None:
        if not self.scheduler.running:
            return
        try:
            self.scheduler.remove_job(RETRY_JOB_ID)
            self.logger.debug("retry_cancelled")
        except JobLookupError:
            pass

    def _realign_interval_job(self, next_run: datetime) -> None:
        if not self.scheduler.running:
            return
        if self.scheduler.get_job(INTERVAL_JOB_ID) is None:
            return
        self.scheduler.modify_job(INTERVAL_JOB_ID, next_run_time=next_run)
        self.logger.debug("interval_job_realigned", next_run=next_run.isoformat())
