"""Sentinel executors used when the real executor cannot be resolved."""

import logging
from uuid import UUID

from jobqueue.executors.base import JobExecutor
from jobqueue.models.job import JobStatus


class UnknownJobExecutor(JobExecutor):
    """Stands in for a job type with no registered provider."""

    def __init__(self, job_type=None):
        self.job_type = job_type

    def _run(self, arguments: str, job_id: UUID, logger: logging.Logger) -> JobStatus:
        logger.error(f"Unknown job type. ({self.job_type!r})")
        return JobStatus.FAILED


class CreationFailedExecutor(JobExecutor):
    """Stands in for an executor whose provider raised during creation."""

    def __init__(self, reason: BaseException):
        self.reason = reason

    def _run(self, arguments: str, job_id: UUID, logger: logging.Logger) -> JobStatus:
        logger.error(
            "Creation failed.",
            exc_info=(type(self.reason), self.reason, self.reason.__traceback__),
        )
        return JobStatus.FAILED
