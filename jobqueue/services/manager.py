"""Read-side queries over jobs and their stored files."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from jobqueue.models.job import Job
from jobqueue.schemas.job import JobEntry, JobPage
from jobqueue.services.file_provider import LOG_FILE, OUTPUT_FILE, JobFileInfo, JobFileProvider, job_file_key

logger = logging.getLogger(__name__)


def to_entry(job: Job, include_arguments: bool = True) -> JobEntry:
    """Project a job row into a JobEntry without children."""
    entry = JobEntry.model_validate(job)
    if not include_arguments:
        entry.arguments = None
    return entry


class JobManager:
    """Query surface for jobs. Never writes to the job store."""

    def __init__(self, db: Session, file_provider: JobFileProvider):
        """Initialize manager."""
        self.db = db
        self.file_provider = file_provider

    def get_jobs(self, owner_id: Optional[int] = None, page: int = 1, count: int = 20) -> JobPage:
        """
        List root jobs, newest first, without children or arguments.

        Args:
            owner_id: Only jobs of this owner; None lists every owner
            page: 1-based page number
            count: Page size

        Returns:
            JobPage with the requested slice and the total number of root jobs
        """
        if page < 1 or count < 1:
            raise ValueError("page and count must be positive")

        conditions = [Job.parent_job_id.is_(None)]
        if owner_id is not None:
            conditions.append(Job.owner_id == owner_id)

        total = self.db.execute(select(func.count(Job.job_id)).where(*conditions)).scalar()
        jobs = self.db.execute(
            select(Job)
            .where(*conditions)
            .order_by(Job.job_id.desc())
            .offset((page - 1) * count)
            .limit(count)
        ).scalars().all()

        return JobPage(
            items=[to_entry(j, include_arguments=False) for j in jobs],
            page=page,
            count=count,
            total=total,
        )

    def get_children(self, job_id: UUID, owner_id: Optional[int] = None) -> List[JobEntry]:
        """Get the children of a composite job in creation order."""
        stmt = select(Job).where(Job.parent_job_id == job_id)
        if owner_id is not None:
            stmt = stmt.where(Job.owner_id == owner_id)

        children = self.db.execute(stmt.order_by(Job.job_id)).scalars().all()
        return [to_entry(c) for c in children]

    def find_job(self, job_id: UUID, owner_id: Optional[int] = None) -> Optional[JobEntry]:
        """Find a job by id, loading its children if it is composite."""
        stmt = select(Job).where(Job.job_id == job_id)
        if owner_id is not None:
            stmt = stmt.where(Job.owner_id == owner_id)

        job = self.db.execute(stmt).scalar_one_or_none()
        if job is None:
            return None

        entry = to_entry(job)
        if job.composite:
            entry.children = self.get_children(job_id, owner_id)
        return entry

    def get_logs(self, job_id: UUID) -> JobFileInfo:
        """Get the captured execution log file of a job."""
        return self.file_provider.get_file_info(job_file_key(job_id, LOG_FILE))

    def get_download(self, job_id: UUID) -> JobFileInfo:
        """Get the output file of a job."""
        return self.file_provider.get_file_info(job_file_key(job_id, OUTPUT_FILE))
