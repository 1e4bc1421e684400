"""Periodic background sync.

Runs a fixed set of named async jobs on an interval (first run after a short
delay). A run that is still in progress makes the next tick a no-op. Job
failures never stop the loop; each run's outcome per job is logged and kept
in last_results for /api/sync/status.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from household.utilities import config

logger = logging.getLogger(__name__)

SyncJob = Callable[[], Awaitable[Any]]


class BackgroundSync:
    def __init__(self, interval: Optional[float] = None, initial_delay: Optional[float] = None):
        self.interval = config.SYNC_INTERVAL_SECONDS if interval is None else interval
        self.initial_delay = config.SYNC_INITIAL_DELAY_SECONDS if initial_delay is None else initial_delay
        self._jobs: Dict[str, SyncJob] = {}
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self.last_run_at: Optional[str] = None
        self.last_results: Dict[str, Dict[str, Any]] = {}

    def register(self, name: str, job: SyncJob) -> None:
        self._jobs[name] = job

    @property
    def job_names(self):
        return list(self._jobs)

    async def run_once(self) -> Optional[Dict[str, Dict[str, Any]]]:
        """Run every job concurrently; returns None when a run is already in progress."""
        if self._running:
            logger.debug("[background-sync] previous run still in progress, skipping")
            return None
        self._running = True
        try:
            names = list(self._jobs)
            outcomes = await asyncio.gather(*(self._jobs[n]() for n in names), return_exceptions=True)
            results = {}
            for name, outcome in zip(names, outcomes):
                if isinstance(outcome, BaseException):
                    logger.warning("[background-sync] %s: rejected (%s)", name, outcome)
                    results[name] = {"status": "rejected", "error": str(outcome)}
                else:
                    logger.info("[background-sync] %s: fulfilled", name)
                    results[name] = {"status": "fulfilled"}
            self.last_results = results
            self.last_run_at = datetime.now(timezone.utc).isoformat()
            return results
        finally:
            self._running = False

    async def _loop(self):
        await asyncio.sleep(self.initial_delay)
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._loop())
            logger.info("Background sync started (every %ss, jobs: %s)", self.interval, ", ".join(self._jobs))

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    def status(self) -> Dict[str, Any]:
        return {
            "enabled": self._task is not None and not self._task.done(),
            "interval_seconds": self.interval,
            "jobs": self.job_names,
            "running": self._running,
            "last_run_at": self.last_run_at,
            "last_results": self.last_results,
        }


__all__ = ['BackgroundSync']
