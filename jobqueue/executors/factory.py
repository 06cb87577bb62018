"""Resolve job types to executors."""

import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from jobqueue.executors.base import ExecutorContext, JobExecutor, JobExecutorProvider
from jobqueue.executors.fallback import CreationFailedExecutor, UnknownJobExecutor

logger = logging.getLogger(__name__)


class JobExecutorFactory:
    """Creates executors from a fixed map of job type to provider."""

    def __init__(self, providers: Mapping[str, JobExecutorProvider]):
        """
        Initialize factory.

        Args:
            providers: Job type to provider; copied and frozen
        """
        self._providers = MappingProxyType(dict(providers))

    @property
    def types(self):
        return tuple(self._providers)

    def try_create(self, job_type: str, context: ExecutorContext) -> JobExecutor:
        """
        Create the executor for a job type.

        Never raises: an unknown type or a failing provider yields a sentinel
        executor that reports a failed job.
        """
        provider = self._providers.get(job_type)
        if provider is None:
            logger.warning(f"No executor registered for job type {job_type!r}")
            return UnknownJobExecutor(job_type)

        try:
            return provider.create(context)
        except Exception as e:
            logger.error(f"Executor provider for {job_type!r} failed: {e}", exc_info=True)
            return CreationFailedExecutor(e)


def build_executor_factory(providers: Iterable[JobExecutorProvider]) -> JobExecutorFactory:
    """
    Build the factory once at startup.

    Raises:
        ValueError: If a provider has no type or two providers share a type
    """
    registry = {}
    for provider in providers:
        if not provider.type:
            raise ValueError(f"Executor provider {provider.__class__.__name__} has no job type")
        if provider.type in registry:
            raise ValueError(f"Duplicate executor provider for job type {provider.type!r}")
        registry[provider.type] = provider

    logger.info(f"Registered job executors: {', '.join(sorted(registry)) or '(none)'}")
    return JobExecutorFactory(registry)
