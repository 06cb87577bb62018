"""Job routes."""

import logging
import uuid
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse, PlainTextResponse
from sqlalchemy.orm import Session

from jobqueue.config import settings
from jobqueue.database import get_db, id_generator
from jobqueue.errors import JobValidationError
from jobqueue.schemas.job import JobDescription, JobEntry, JobPage
from jobqueue.services.file_provider import JobFileProvider, PhysicalJobFileProvider
from jobqueue.services.manager import JobManager, to_entry
from jobqueue.services.scheduler import JobScheduler
from jobqueue.worker import JobSignal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])

# Shared with the background worker so new jobs wake it up
job_signal = JobSignal()


@lru_cache
def get_file_provider() -> JobFileProvider:
    """Physical job file storage rooted at JOB_STORAGE_DIR."""
    return PhysicalJobFileProvider(settings.JOB_STORAGE_DIR)


def get_scheduler(db: Session = Depends(get_db)) -> JobScheduler:
    return JobScheduler(
        db,
        id_generator,
        signal=job_signal,
        composite_aggregation=settings.COMPOSITE_AGGREGATION,
    )


def get_manager(
    db: Session = Depends(get_db),
    file_provider: JobFileProvider = Depends(get_file_provider),
) -> JobManager:
    return JobManager(db, file_provider)


@router.post("", response_model=JobEntry)
def schedule_job(
    description: JobDescription,
    scheduler: JobScheduler = Depends(get_scheduler),
):
    """Schedule a job, optionally with leaf children."""
    try:
        job = scheduler.schedule(description)
    except JobValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return to_entry(job)


@router.get("", response_model=JobPage)
def list_jobs(
    owner_id: Optional[int] = None,
    page: int = 1,
    count: Optional[int] = Query(None, ge=1, le=200),
    manager: JobManager = Depends(get_manager),
):
    """List root jobs, newest first."""
    if page <= 0:
        raise HTTPException(status_code=400, detail="Page must be positive")

    return manager.get_jobs(owner_id, page, count or settings.JOBS_PAGE_SIZE)


@router.get("/{job_id}", response_model=JobEntry)
def get_job(
    job_id: uuid.UUID,
    owner_id: Optional[int] = None,
    manager: JobManager = Depends(get_manager),
):
    """Get a job with its children."""
    entry = manager.find_job(job_id, owner_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return entry


@router.get("/{job_id}/logs", response_class=PlainTextResponse)
def get_job_logs(
    job_id: uuid.UUID,
    manager: JobManager = Depends(get_manager),
):
    """Get the captured execution log of a job."""
    info = manager.get_logs(job_id)
    if not info.exists:
        raise HTTPException(status_code=404, detail="Log not found")
    return PlainTextResponse(info.read_text())


@router.get("/{job_id}/download")
def download_job_output(
    job_id: uuid.UUID,
    manager: JobManager = Depends(get_manager),
):
    """Download the output file of a job under its suggested file name."""
    entry = manager.find_job(job_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Job not found")

    info = manager.get_download(job_id)
    if not info.exists:
        raise HTTPException(status_code=404, detail="Output not found")

    return FileResponse(
        info.physical_path,
        filename=entry.suggested_file_name or f"{job_id}.bin",
        media_type="application/octet-stream",
    )
