"""SQLAlchemy ORM models."""

from jobqueue.models.job import Job, JobStatus

__all__ = [
    "Job",
    "JobStatus",
]
