"""Shared update timing state.

A single SchedulerState instance is owned by the UpdateScheduler and read
by the status endpoints. All writes replace an immutable snapshot under a
lock, so readers never see a half-applied update.
"""

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class SchedulerSnapshot:
    """Point-in-time view of the scheduler's timing state."""

    update_interval: timedelta
    last_update: Optional[datetime] = None
    next_update: Optional[datetime] = None
    running: bool = False
    last_success: Optional[datetime] = None
    last_error: Optional[str] = None
    consecutive_failures: int = 0

    @property
    def update_interval_hours(self) -> float:
        return self.update_interval.total_seconds() / 3600


class SchedulerState:
    """Lock-guarded holder for the current SchedulerSnapshot."""

    def __init__(self, update_interval: timedelta):
        self._lock = asyncio.Lock()
        self._snapshot = SchedulerSnapshot(update_interval=update_interval)

    @property
    def update_interval(self) -> timedelta:
        return self._snapshot.update_interval

    async def snapshot(self) -> SchedulerSnapshot:
        async with self._lock:
            return self._snapshot

    async def mark_running(self) -> SchedulerSnapshot:
        async with self._lock:
            self._snapshot = replace(self._snapshot, running=True)
            return self._snapshot

    async def mark_idle(self) -> SchedulerSnapshot:
        async with self._lock:
            self._snapshot = replace(self._snapshot, running=False)
            return self._snapshot

    async def record_success(self, now: datetime) -> SchedulerSnapshot:
        """Record a successful run finishing at `now`.

        next_update is always now + update_interval.
        """
        async with self._lock:
            self._snapshot = replace(
                self._snapshot,
                running=False,
                last_update=now,
                last_success=now,
                next_update=now + self._snapshot.update_interval,
                last_error=None,
                consecutive_failures=0,
            )
            return self._snapshot

    async def record_failure(self, now: datetime, next_update: datetime, error: str) -> SchedulerSnapshot:
        """Record a failed run finishing at `now`, next attempt at next_update."""
        if next_update <= now:
            raise ValueError("next_update must be after now")
        async with self._lock:
            self._snapshot = replace(
                self._snapshot,
                running=False,
                last_update=now,
                next_update=next_update,
                last_error=error,
                consecutive_failures=self._snapshot.consecutive_failures + 1,
            )
            return self._snapshot
