"""Job executors and the factory that resolves them by job type."""

from jobqueue.executors.base import ExecutorContext, JobExecutor, JobExecutorProvider
from jobqueue.executors.factory import JobExecutorFactory, build_executor_factory
from jobqueue.executors.fallback import CreationFailedExecutor, UnknownJobExecutor
from jobqueue.executors.ping_pong import PingPongProvider

# Providers registered by the application at startup
DEFAULT_PROVIDERS = (
    PingPongProvider,
)

__all__ = [
    "ExecutorContext",
    "JobExecutor",
    "JobExecutorProvider",
    "JobExecutorFactory",
    "build_executor_factory",
    "CreationFailedExecutor",
    "UnknownJobExecutor",
    "PingPongProvider",
    "DEFAULT_PROVIDERS",
]
