"""Background worker that executes queued jobs."""

import logging
import threading
import time

from sqlalchemy.orm import Session

from jobqueue.config import settings
from jobqueue.errors import ConcurrencyConflictError
from jobqueue.executors import DEFAULT_PROVIDERS, ExecutorContext, JobExecutorFactory, build_executor_factory
from jobqueue.ids import SequentialIdGenerator
from jobqueue.models.job import Job, JobStatus, utcnow
from jobqueue.services.file_provider import JobFileProvider, PhysicalJobFileProvider
from jobqueue.services.job_logger import create_job_logger
from jobqueue.services.scheduler import JobScheduler

logger = logging.getLogger(__name__)


class JobSignal:
    """Wake-up signal letting the scheduler nudge an idle worker."""

    def __init__(self):
        self._event = threading.Event()

    def notify(self):
        self._event.set()

    def wait(self, timeout: float) -> bool:
        """Wait until notified or the timeout expires, then reset."""
        notified = self._event.wait(timeout)
        self._event.clear()
        return notified


class Worker:
    """
    Single serial consumer of the job queue.

    Only one worker may run against a store at a time; dequeueing is not
    coordinated between workers.
    """

    def __init__(
        self,
        session_factory,
        id_generator: SequentialIdGenerator,
        factory: JobExecutorFactory,
        file_provider: JobFileProvider,
        signal: JobSignal = None,
        poll_interval: float = None,
        composite_aggregation: bool = None,
    ):
        """Initialize worker."""
        self.session_factory = session_factory
        self.id_generator = id_generator
        self.factory = factory
        self.file_provider = file_provider
        self.signal = signal or JobSignal()
        self.poll_interval = settings.WORKER_POLL_INTERVAL if poll_interval is None else poll_interval
        self.composite_aggregation = (
            settings.COMPOSITE_AGGREGATION if composite_aggregation is None else composite_aggregation
        )

    def _scheduler(self, db: Session) -> JobScheduler:
        return JobScheduler(
            db,
            self.id_generator,
            signal=self.signal,
            composite_aggregation=self.composite_aggregation,
        )

    def run(self, stop_event=None):
        """Main worker loop.

        Args:
            stop_event: Optional threading.Event to signal worker to stop
        """
        logger.info("Worker started")

        while True:
            # Check if stop signal received
            if stop_event and stop_event.is_set():
                logger.info("Worker stop signal received")
                break

            try:
                if not self.run_once():
                    self.signal.wait(self.poll_interval)

            except KeyboardInterrupt:
                logger.info("Worker shutting down")
                break
            except Exception as e:
                logger.error(f"Worker error: {e}", exc_info=True)
                time.sleep(self.poll_interval)

    def run_once(self) -> bool:
        """
        Dequeue and process at most one job.

        Returns:
            True if a job was processed, False if the queue was empty
        """
        db = self.session_factory()
        try:
            scheduler = self._scheduler(db)
            job = scheduler.dequeue()
            if job is None:
                return False

            self.process_job(job, scheduler)
            return True
        finally:
            db.close()

    def process_job(self, job: Job, scheduler: JobScheduler):
        """Execute a dequeued job, save its log and record the outcome."""
        job_id = job.job_id
        logger.info(f"Processing job {job_id} (type: {job.job_type})")

        context = ExecutorContext(file_provider=self.file_provider)
        executor = self.factory.try_create(job.job_type, context)
        job_logger, buffer = create_job_logger(job_id)

        try:
            result = executor.execute(job.arguments, job_id, job_logger)
        except Exception as e:
            # Executors must not raise; keep the loop alive if one does.
            job_logger.error(f"Unknown exception: {e}", exc_info=True)
            result = JobStatus.FAILED

        try:
            self.file_provider.save_log(job_id, buffer.getvalue())
        except Exception as e:
            logger.error(f"Could not save log of job {job_id}: {e}", exc_info=True)
        finally:
            buffer.close()

        try:
            scheduler.mark(job, result, utcnow(), JobStatus.RUNNING)
        except ConcurrencyConflictError as e:
            logger.warning(f"Job {job_id} changed while running, result {result.value} dropped: {e}")
            return

        logger.info(f"Job {job_id} completed with status {result.value}")


def create_worker(session_factory, id_generator, signal=None) -> Worker:
    """Build a worker with the default executors and physical file storage."""
    factory = build_executor_factory(provider() for provider in DEFAULT_PROVIDERS)
    file_provider = PhysicalJobFileProvider(settings.JOB_STORAGE_DIR)
    return Worker(session_factory, id_generator, factory, file_provider, signal=signal)


def worker_loop(stop_event=None, signal=None):
    """Run worker loop (for use as background thread).

    Args:
        stop_event: Optional threading.Event to signal worker to stop
        signal: Optional JobSignal shared with request handlers
    """
    from jobqueue.database import SessionLocal, id_generator

    worker = create_worker(SessionLocal, id_generator, signal=signal)
    worker.run(stop_event=stop_event)


def main():
    """Entry point for standalone worker."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    worker_loop()


if __name__ == "__main__":
    main()
