"""FastAPI application entry point."""

import logging
import os
import threading

import sqlalchemy
from fastapi import FastAPI

from jobqueue.config import settings
from jobqueue.routes import jobs

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Job Queue",
    description="Durable background job queue with composite jobs",
    version="0.1.0",
)

# Include routers
app.include_router(jobs.router)

# Worker thread management
worker_thread = None
worker_stop_event = threading.Event()


def run_worker_loop():
    """Run the worker loop in a background thread."""
    from jobqueue.worker import worker_loop
    logger.info("Starting background worker thread")
    worker_loop(worker_stop_event, signal=jobs.job_signal)


def run_migrations():
    """Create the jobs table through Alembic if it does not exist yet."""
    from jobqueue.database import engine

    if sqlalchemy.inspect(engine).has_table("jobs"):
        logger.info("Database tables already exist, skipping migrations")
        return

    logger.info("Running database migrations...")
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config(os.path.join(os.path.dirname(os.path.dirname(__file__)), "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    alembic_cfg.attributes["configure_logger"] = False
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed successfully")


@app.on_event("startup")
async def startup_event():
    """Run migrations and start the background worker."""
    global worker_thread
    logger.info("Starting application...")

    run_migrations()

    if not settings.WORKER_ENABLED:
        logger.info("Worker disabled by configuration")
        return

    worker_stop_event.clear()
    worker_thread = threading.Thread(target=run_worker_loop, daemon=True)
    worker_thread.start()
    logger.info("Background worker thread started")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the background worker when the app shuts down."""
    logger.info("Shutting down application...")

    # Signal worker to stop and wake it if idle
    worker_stop_event.set()
    jobs.job_signal.notify()

    # Wait for worker thread to finish (with timeout)
    if worker_thread and worker_thread.is_alive():
        worker_thread.join(timeout=10)
        logger.info("Background worker thread stopped")


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}
