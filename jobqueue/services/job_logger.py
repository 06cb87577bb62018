"""In-memory logger that captures one job's execution output."""

import io
import logging
from typing import Tuple


class JobLogFormatter(logging.Formatter):
    """Format each record as a header line, the message and a blank line."""

    def __init__(self):
        super().__init__(fmt="[%(asctime)s] %(levelname)s =====>\n%(message)s")

    def format(self, record: logging.LogRecord) -> str:
        return super().format(record) + "\n"


def create_job_logger(job_id) -> Tuple[logging.Logger, io.StringIO]:
    """
    Create a logger whose output is captured for later retrieval.

    The logger is not registered with the logging manager and does not
    propagate, so its records never reach the process log handlers.

    Args:
        job_id: Job the logger belongs to

    Returns:
        Tuple of (logger, buffer holding the captured text)
    """
    buffer = io.StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(JobLogFormatter())

    job_logger = logging.Logger(f"jobqueue.job.{job_id}", level=logging.DEBUG)
    job_logger.addHandler(handler)
    job_logger.propagate = False
    return job_logger, buffer
