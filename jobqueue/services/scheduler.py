"""Job scheduler: creates job trees, dequeues leaf jobs and marks status."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session, aliased
from sqlalchemy.orm.attributes import set_committed_value

from jobqueue.errors import ConcurrencyConflictError, JobNotFoundError, JobValidationError
from jobqueue.ids import SequentialIdGenerator
from jobqueue.models.job import Job, JobStatus, as_utc, utcnow
from jobqueue.schemas.job import JobDescription

logger = logging.getLogger(__name__)

INVALID_FILE_NAME_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(i) for i in range(32))

# Terminal child statuses that stop the rest of a composite job
STOPPING_STATUSES = frozenset({JobStatus.FAILED, JobStatus.CANCELLED, JobStatus.UNKNOWN})


class JobScheduler:
    """Owns the job state machine on top of the job store."""

    def __init__(
        self,
        db: Session,
        id_generator: SequentialIdGenerator,
        signal=None,
        composite_aggregation: bool = True,
    ):
        """
        Initialize the scheduler.

        Args:
            db: Database session
            id_generator: Generator for this store's job ids
            signal: Optional wake-up signal notified after scheduling
            composite_aggregation: Derive composite status from children on mark
        """
        self.db = db
        self.id_generator = id_generator
        self.signal = signal
        self.composite_aggregation = composite_aggregation

    def _build(self, description: JobDescription, parent: Optional[Job], out: List[Job]):
        """Validate a description and append the jobs it creates to ``out``."""
        is_leaf = description.is_leaf

        if not is_leaf and parent is not None:
            raise JobValidationError("Multiple nested job is not supported yet.")

        name = description.suggested_file_name
        if name is not None and (name in ("", ".", "..") or any(c in INVALID_FILE_NAME_CHARS for c in name)):
            raise JobValidationError(f"The suggested file name is invalid: {name!r}")

        job = Job(
            job_id=self.id_generator.create(),
            owner_id=description.owner_id,
            status=JobStatus.PENDING if is_leaf else JobStatus.COMPOSITE,
            composite=not is_leaf,
            suggested_file_name=name,
            arguments=description.arguments if description.arguments is not None else "{}",
            creation_time=utcnow(),
            job_type=description.job_type,
            parent_job_id=parent.job_id if parent is not None else None,
        )
        out.append(job)

        for child in description.children:
            self._build(child, job, out)

    def schedule(self, description: JobDescription) -> Job:
        """
        Persist a job tree and return its root.

        The root row and the child rows are committed as two separate writes.
        A crash in between leaves a composite root without children; nothing
        compensates for that.

        Raises:
            JobValidationError: If the description is rejected (nothing is written)
        """
        to_create: List[Job] = []
        self._build(description, None, to_create)

        root = to_create[0]
        self.db.add(root)
        self.db.commit()

        if len(to_create) > 1:
            self.db.add_all(to_create[1:])
            self.db.commit()

        logger.info(f"Scheduled job {root.job_id} ({root.job_type}) with {len(to_create) - 1} children")

        if self.signal is not None:
            self.signal.notify()
        return root

    def dequeue(self) -> Optional[Job]:
        """
        Claim the oldest pending leaf job and mark it running.

        Only one execution loop is expected to call this at a time. The claim
        is still a conditional update, so a job taken by someone else between
        the select and the update is skipped rather than returned twice.

        Returns:
            The claimed job, or None if no pending leaf job exists
        """
        while True:
            job = self.db.execute(
                select(Job)
                .where(Job.status == JobStatus.PENDING, Job.composite.is_(False))
                .order_by(Job.job_id)
                .limit(1)
            ).scalar_one_or_none()

            if job is None:
                return None

            result = self.db.execute(
                update(Job)
                .where(Job.job_id == job.job_id, Job.status == JobStatus.PENDING)
                .values(status=JobStatus.RUNNING)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()

            if result.rowcount == 1:
                self.db.refresh(job)
                logger.info(f"Dequeued job {job.job_id} ({job.job_type})")
                return job

            logger.warning(f"Job {job.job_id} was claimed concurrently, trying next")

    def mark(
        self,
        job: Job,
        status: JobStatus,
        complete_time: Optional[datetime] = None,
        prev_status: Optional[JobStatus] = None,
    ) -> None:
        """
        Update a job's status, optionally only if it still has ``prev_status``.

        Args:
            job: The job to update; its status is updated on success
            status: New status
            complete_time: Completion time to record, if any
            prev_status: Expected stored status; None skips the check

        Raises:
            ConcurrencyConflictError: If the stored status is not ``prev_status``
            JobNotFoundError: If no check was requested and the job does not exist
        """
        job_id, parent_id = job.job_id, job.parent_job_id
        complete_time = as_utc(complete_time)

        stmt = update(Job).where(Job.job_id == job_id)
        if prev_status is not None:
            stmt = stmt.where(Job.status == prev_status)

        result = self.db.execute(
            stmt.values(status=status, complete_time=complete_time)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            self.db.rollback()
            if prev_status is not None:
                raise ConcurrencyConflictError(job_id, prev_status)
            raise JobNotFoundError(job_id)

        self.db.commit()

        set_committed_value(job, "status", status)
        set_committed_value(job, "complete_time", complete_time)

        if self.composite_aggregation and parent_id is not None:
            self._aggregate_parent(job_id, parent_id, status, complete_time)

    def _aggregate_parent(self, job_id, parent_id, status: JobStatus, complete_time: Optional[datetime]):
        """Derive the parent's status from its children after a child is marked."""
        if status in STOPPING_STATUSES:
            # A cancelled child cancels the parent; failed or unknown fails it
            parent_status = JobStatus.CANCELLED if status == JobStatus.CANCELLED else JobStatus.FAILED
            self.db.execute(
                update(Job)
                .where(Job.job_id == parent_id, Job.status == JobStatus.COMPOSITE)
                .values(status=parent_status, complete_time=complete_time or utcnow())
                .execution_options(synchronize_session=False)
            )
            cancelled = self.db.execute(
                update(Job)
                .where(Job.parent_job_id == parent_id, Job.status == JobStatus.PENDING)
                .values(status=JobStatus.CANCELLED)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            logger.info(
                f"Child {job_id} ended {status.value}; parent {parent_id} {parent_status.value}, "
                f"{cancelled.rowcount} siblings cancelled"
            )

        elif status == JobStatus.FINISHED:
            sibling = aliased(Job)
            unfinished = (
                select(sibling.job_id)
                .where(sibling.parent_job_id == parent_id, sibling.status != JobStatus.FINISHED)
                .exists()
            )
            result = self.db.execute(
                update(Job)
                .where(Job.job_id == parent_id, Job.status == JobStatus.COMPOSITE, ~unfinished)
                .values(status=JobStatus.FINISHED, complete_time=complete_time or utcnow())
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            if result.rowcount:
                logger.info(f"All children of {parent_id} finished; parent finished")
