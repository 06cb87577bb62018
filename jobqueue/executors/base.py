"""Base classes for job executors and their providers."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import UUID

from jobqueue.models.job import JobStatus
from jobqueue.services.file_provider import JobFileProvider


@dataclass
class ExecutorContext:
    """Services a provider may hand to the executors it creates."""

    file_provider: JobFileProvider


class JobExecutor(ABC):
    """
    Runs one job and reports its terminal status.

    ``execute`` never raises: anything raised by ``_run`` is written to the
    job logger and reported as ``JobStatus.FAILED``.
    """

    def execute(self, arguments: str, job_id: UUID, logger: logging.Logger) -> JobStatus:
        """
        Execute the job.

        Args:
            arguments: The job's opaque argument string
            job_id: The job id
            logger: Logger whose output is saved as the job log

        Returns:
            Terminal job status
        """
        try:
            return self._run(arguments, job_id, logger)
        except Exception as e:
            logger.error(f"Unhandled error in {self.__class__.__name__}: {e}", exc_info=True)
            return JobStatus.FAILED

    @abstractmethod
    def _run(self, arguments: str, job_id: UUID, logger: logging.Logger) -> JobStatus:
        """Run the executor logic (to be implemented by subclasses)."""
        ...


class JobExecutorProvider(ABC):
    """
    Creates executors for one job type.

    Providers are registered once at startup and reused for every job.
    """

    type: str = ""

    @abstractmethod
    def create(self, context: ExecutorContext) -> JobExecutor:
        """Create an executor for a single job."""
        ...
