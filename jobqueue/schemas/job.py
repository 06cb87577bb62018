"""Job-related Pydantic schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from jobqueue.models.job import JobStatus


class JobDescription(BaseModel):
    """Caller-supplied description of a job, optionally with leaf children."""

    owner_id: int
    suggested_file_name: Optional[str] = None
    arguments: Optional[str] = None
    job_type: Optional[str] = None
    children: List["JobDescription"] = Field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children


class JobEntry(BaseModel):
    """Read projection of a job, with children for composite lookups."""

    model_config = ConfigDict(from_attributes=True)

    job_id: UUID
    owner_id: int
    status: JobStatus
    suggested_file_name: Optional[str] = None
    arguments: Optional[str] = None
    creation_time: datetime
    complete_time: Optional[datetime] = None
    job_type: Optional[str] = None
    parent_job_id: Optional[UUID] = None
    composite: bool = False
    children: Optional[List["JobEntry"]] = None


class JobPage(BaseModel):
    """One page of root job entries."""

    items: List[JobEntry]
    page: int
    count: int
    total: int

    @property
    def has_next(self) -> bool:
        return self.page * self.count < self.total
