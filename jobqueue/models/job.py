"""Job model for the background job queue."""

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Index, Integer, Text, TypeDecorator, Uuid

from jobqueue.database import Base


class JobStatus(str, enum.Enum):
    """Lifecycle status of a job."""

    UNKNOWN = "unknown"
    COMPOSITE = "composite"
    PENDING = "pending"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"
    CANCELLED = "cancelled"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timestamp that always loads as an aware UTC datetime.

    SQLite keeps no offset, so values are normalized to UTC on the way in
    and tagged with UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return as_utc(value)

    def process_result_value(self, value, dialect):
        return as_utc(value)


class Job(Base):
    """Job represents a leaf unit of work or a composite container of leaves."""

    __tablename__ = "jobs"

    job_id = Column(Uuid, primary_key=True)  # Sequential, see jobqueue.ids
    owner_id = Column(Integer, nullable=False)
    status = Column(
        Enum(
            JobStatus,
            native_enum=False,
            length=16,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    suggested_file_name = Column(Text)
    arguments = Column(Text)  # Opaque, interpreted by the executor
    creation_time = Column(UTCDateTime, nullable=False, default=utcnow)
    complete_time = Column(UTCDateTime)
    job_type = Column(Text)
    parent_job_id = Column(Uuid, ForeignKey("jobs.job_id", ondelete="RESTRICT"))
    composite = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_jobs_status", "status"),
        Index("idx_jobs_owner_id", "owner_id"),
        Index("idx_jobs_parent_job_id", "parent_job_id"),
        Index("idx_jobs_creation_time", "creation_time"),
    )

    def __repr__(self) -> str:
        return f"<Job {self.job_id} {self.job_type} {self.status.value if self.status else None}>"
