from .scheduler import JobScheduler, ScheduledJob, JobStatus
from .jobs import create_scheduler, sui_heartbeat

__all__ = [
    "JobScheduler",
    "ScheduledJob",
    "JobStatus",
    "create_scheduler",
    "sui_heartbeat"
]
