"""Sample executor that echoes its arguments into the job output."""

import logging
from uuid import UUID

from jobqueue.executors.base import ExecutorContext, JobExecutor, JobExecutorProvider
from jobqueue.models.job import JobStatus
from jobqueue.services.file_provider import JobFileProvider


class PingPongExecutor(JobExecutor):

    def __init__(self, file_provider: JobFileProvider):
        self.file_provider = file_provider

    def _run(self, arguments: str, job_id: UUID, logger: logging.Logger) -> JobStatus:
        self.file_provider.save_output(job_id, arguments)
        logger.info(f"Pong! from {job_id}")
        return JobStatus.FINISHED


class PingPongProvider(JobExecutorProvider):

    type = "Sample.PingPong"

    def create(self, context: ExecutorContext) -> JobExecutor:
        return PingPongExecutor(context.file_provider)
