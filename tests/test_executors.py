"""Tests for executor resolution and failure isolation."""

import logging
import uuid

import pytest

from jobqueue.executors import (
    CreationFailedExecutor,
    ExecutorContext,
    JobExecutor,
    JobExecutorProvider,
    PingPongProvider,
    UnknownJobExecutor,
    build_executor_factory,
)
from jobqueue.models.job import JobStatus
from jobqueue.services.job_logger import create_job_logger


class BrokenProvider(JobExecutorProvider):
    type = "Broken"

    def create(self, context):
        raise RuntimeError("cannot build executor")


class RaisingExecutor(JobExecutor):
    def _run(self, arguments, job_id, logger):
        raise ValueError("boom")


class RaisingProvider(JobExecutorProvider):
    type = "Raising"

    def create(self, context):
        return RaisingExecutor()


@pytest.fixture
def context(file_provider):
    return ExecutorContext(file_provider=file_provider)


@pytest.fixture
def factory():
    return build_executor_factory([PingPongProvider(), BrokenProvider(), RaisingProvider()])


def test_unknown_type_returns_failing_sentinel(factory, context):
    """Test that an unregistered type degrades to a failed job."""
    executor = factory.try_create("Nope", context)
    job_logger, buffer = create_job_logger("job")

    assert isinstance(executor, UnknownJobExecutor)
    assert executor.execute("{}", uuid.uuid4(), job_logger) == JobStatus.FAILED
    assert "Unknown job type." in buffer.getvalue()


def test_failing_provider_returns_failing_sentinel(factory, context):
    """Test that a provider error is captured instead of raised."""
    executor = factory.try_create("Broken", context)
    job_logger, buffer = create_job_logger("job")

    assert isinstance(executor, CreationFailedExecutor)
    assert isinstance(executor.reason, RuntimeError)
    assert executor.execute("{}", uuid.uuid4(), job_logger) == JobStatus.FAILED
    assert "Creation failed." in buffer.getvalue()
    assert "cannot build executor" in buffer.getvalue()


def test_executor_errors_become_failed_status(factory, context):
    """Test that an exception inside an executor is reported, not raised."""
    executor = factory.try_create("Raising", context)
    job_logger, buffer = create_job_logger("job")

    assert executor.execute("{}", uuid.uuid4(), job_logger) == JobStatus.FAILED
    assert "boom" in buffer.getvalue()
    assert "Traceback" in buffer.getvalue()


def test_ping_pong_writes_output(factory, context, file_provider):
    """Test the sample executor."""
    job_id = uuid.uuid4()
    job_logger, buffer = create_job_logger(job_id)

    status = factory.try_create("Sample.PingPong", context).execute("hello", job_id, job_logger)

    assert status == JobStatus.FINISHED
    assert file_provider.get_output(job_id).read_text() == "hello"
    assert f"Pong! from {job_id}" in buffer.getvalue()


def test_registry_is_read_only(factory):
    """Test that providers cannot be added after startup."""
    assert set(factory.types) == {"Sample.PingPong", "Broken", "Raising"}
    with pytest.raises(TypeError):
        factory._providers["Other"] = PingPongProvider()


def test_duplicate_provider_types_rejected():
    """Test that two providers for one type fail at startup."""
    with pytest.raises(ValueError):
        build_executor_factory([PingPongProvider(), PingPongProvider()])


def test_job_logger_does_not_propagate(caplog):
    """Test that captured job output stays out of the process log."""
    job_logger, buffer = create_job_logger("job")

    with caplog.at_level(logging.DEBUG):
        job_logger.info("private detail")

    assert "private detail" in buffer.getvalue()
    assert "INFO =====>" in buffer.getvalue()
    assert "private detail" not in caplog.text
