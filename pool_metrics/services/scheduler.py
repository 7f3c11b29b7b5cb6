"""Interval job scheduling with one run in flight per job"""

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set
import logging

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ScheduledJob:
    """A named periodic job and its run guard"""

    def __init__(
        self,
        name: str,
        func: Callable[[], Awaitable[Any]],
        interval_seconds: float,
        run_on_start: bool = True
    ):
        self.name = name
        self.func = func
        self.interval_seconds = interval_seconds
        self.run_on_start = run_on_start
        self.guard = asyncio.Lock()

        self.status = JobStatus.IDLE
        self.runs = 0
        self.skipped = 0
        self.last_started_at: Optional[datetime] = None
        self.last_finished_at: Optional[datetime] = None
        self.last_result: Any = None
        self.last_error: Optional[str] = None

    @property
    def in_flight(self) -> bool:
        return self.guard.locked()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'status': self.status,
            'interval_seconds': self.interval_seconds,
            'in_flight': self.in_flight,
            'runs': self.runs,
            'skipped': self.skipped,
            'last_started_at': self.last_started_at,
            'last_finished_at': self.last_finished_at,
            'last_result': self.last_result,
            'last_error': self.last_error
        }


class JobScheduler:
    """Runs registered jobs on a fixed cadence.

    Ticks fire on schedule even when the previous run is still going; a
    tick (or manual trigger) that finds the job's guard held is counted as
    skipped instead of starting an overlapping run.
    """

    def __init__(self):
        self.jobs: Dict[str, ScheduledJob] = {}
        self.running = False
        self._loops: List[asyncio.Task] = []
        self._runs: Set[asyncio.Task] = set()

    def register(
        self,
        name: str,
        func: Callable[[], Awaitable[Any]],
        interval_seconds: float,
        run_on_start: bool = True
    ) -> ScheduledJob:
        if name in self.jobs:
            raise ValueError(f"Job {name} already registered")
        job = ScheduledJob(name, func, interval_seconds, run_on_start)
        self.jobs[name] = job
        logger.info(f"[Scheduler] Scheduling {name} to run every {interval_seconds}s")
        return job

    def get_job(self, name: str) -> ScheduledJob:
        if name not in self.jobs:
            raise KeyError(f"Unknown job {name}")
        return self.jobs[name]

    async def run_job(self, name: str) -> Any:
        """Run a job now unless a run is already in flight"""

        job = self.get_job(name)
        if job.guard.locked():
            job.skipped += 1
            logger.warning(f"[Scheduler] {name} is still running, skipping this invocation")
            return None

        async with job.guard:
            job.status = JobStatus.RUNNING
            job.runs += 1
            job.last_started_at = datetime.now(timezone.utc)
            job.last_error = None
            try:
                result = await job.func()
                job.last_result = result
                job.status = JobStatus.COMPLETED
                return result
            except Exception as e:
                logger.error(f"[Scheduler] {name} failed: {e}")
                job.last_error = str(e)
                job.status = JobStatus.FAILED
                return None
            finally:
                job.last_finished_at = datetime.now(timezone.utc)

    def trigger(self, name: str) -> bool:
        """Start a run in the background; False if one is already in flight"""

        job = self.get_job(name)
        if job.in_flight:
            job.skipped += 1
            return False
        self._spawn(name)
        return True

    def _spawn(self, name: str):
        task = asyncio.create_task(self.run_job(name))
        self._runs.add(task)
        task.add_done_callback(self._runs.discard)

    async def _loop(self, job: ScheduledJob):
        if job.run_on_start:
            self._spawn(job.name)
        while self.running:
            await asyncio.sleep(job.interval_seconds)
            if self.running:
                self._spawn(job.name)

    def start(self):
        if self.running:
            return
        self.running = True
        logger.info("[Scheduler] Initializing")
        for job in self.jobs.values():
            self._loops.append(asyncio.create_task(self._loop(job)))
        logger.info(f"[Scheduler] Running. {len(self.jobs)} jobs active")

    async def stop(self):
        """Stop scheduling; in-flight runs are allowed to finish"""

        self.running = False
        for task in self._loops:
            task.cancel()
        await asyncio.gather(*self._loops, return_exceptions=True)
        self._loops.clear()

        if self._runs:
            logger.info(f"[Scheduler] Waiting for {len(self._runs)} in-flight runs")
            await asyncio.gather(*list(self._runs), return_exceptions=True)
        logger.info("[Scheduler] Stopped")

    def status(self) -> List[Dict[str, Any]]:
        return [job.to_dict() for job in self.jobs.values()]
