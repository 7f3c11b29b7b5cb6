"""Job status and control routes"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from pool_metrics.api import CachedPriceStore
from pool_metrics.services import JobScheduler, JobStatus
from .dependencies import get_cached_store, get_scheduler

logger = logging.getLogger(__name__)

router = APIRouter()


class JobInfo(BaseModel):
    name: str
    status: JobStatus
    interval_seconds: float
    in_flight: bool
    runs: int
    skipped: int
    last_started_at: Optional[datetime] = None
    last_finished_at: Optional[datetime] = None
    last_result: Optional[Dict[str, Any]] = None
    last_error: Optional[str] = None


class TriggerResponse(BaseModel):
    job: str
    started: bool
    message: str


def _job_info(job: Dict[str, Any]) -> JobInfo:
    result = job['last_result']
    if result is not None:
        # Decimals, dates and tuple keys in engine results
        result = jsonable_encoder(result)
        if 'pool_types' in result:
            result['pool_types'] = len(result['pool_types'])
    return JobInfo(**{**job, 'last_result': result})


@router.get("/jobs", response_model=List[JobInfo])
async def list_jobs(scheduler: JobScheduler = Depends(get_scheduler)):
    """Status of every scheduled job"""
    return [_job_info(job) for job in scheduler.status()]


@router.get("/jobs/{name}", response_model=JobInfo)
async def get_job(name: str, scheduler: JobScheduler = Depends(get_scheduler)):
    try:
        job = scheduler.get_job(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown job {name}")
    return _job_info(job.to_dict())


@router.post("/jobs/{name}/run", response_model=TriggerResponse, status_code=202)
async def run_job(name: str, scheduler: JobScheduler = Depends(get_scheduler)):
    """Start a job now, unless a run of it is already in flight"""

    try:
        started = scheduler.trigger(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown job {name}")

    if not started:
        raise HTTPException(status_code=409, detail=f"Job {name} is already running")

    logger.info(f"Manual run of {name} started")
    return TriggerResponse(job=name, started=True, message="Run started")


@router.get("/cache/stats")
async def cache_stats(store: CachedPriceStore = Depends(get_cached_store)):
    """Hit/miss counters of the price and decimals caches"""
    return store.stats()
