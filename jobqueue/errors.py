"""Job subsystem exceptions."""


class JobError(Exception):
    """Base exception for all job subsystem errors."""
    pass


class JobValidationError(JobError):
    """
    Raised when a job description is rejected before anything is persisted.

    Examples:
    - A child description that has children of its own
    - A suggested file name that is not a valid file name
    """
    pass


class JobNotFoundError(JobError):
    """Raised when a requested job does not exist."""

    def __init__(self, job_id):
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class ConcurrencyConflictError(JobError):
    """
    Raised when a conditional status update matched no rows.

    The stored status was not the expected previous status, so another
    writer changed the job in between.
    """

    def __init__(self, job_id, expected_status):
        self.job_id = job_id
        self.expected_status = expected_status
        super().__init__(
            f"Concurrency conflict for job {job_id}: "
            f"previous status is no longer '{getattr(expected_status, 'value', expected_status)}'"
        )
