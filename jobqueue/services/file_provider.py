"""Per-job file storage for logs and output artifacts.

Files are addressed by a key of the form ``"{job_id}/{kind}"`` where kind is
``log`` for the captured execution log and ``main`` for the job's output.
"""

import logging
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)

LOG_FILE = "log"
OUTPUT_FILE = "main"


def job_file_key(job_id, kind: str) -> str:
    """Build the storage key for one of a job's files."""
    return f"{job_id}/{kind}"


@dataclass
class JobFileInfo:
    """Metadata for a stored job file."""

    name: str
    physical_path: Optional[Path]
    exists: bool
    length: int = -1
    last_modified: Optional[datetime] = None

    def read_bytes(self) -> bytes:
        if not self.exists:
            raise FileNotFoundError(self.name)
        return self.physical_path.read_bytes()

    def read_text(self) -> str:
        if not self.exists:
            raise FileNotFoundError(self.name)
        return self.physical_path.read_text(encoding="utf-8")


class JobFileProvider(ABC):
    """Key-addressed mutable file store used by the job subsystem."""

    @abstractmethod
    def get_file_info(self, key: str) -> JobFileInfo:
        ...

    @abstractmethod
    def write_bytes(self, key: str, content: bytes) -> JobFileInfo:
        ...

    @abstractmethod
    def write_stream(self, key: str, content: BinaryIO) -> JobFileInfo:
        ...

    def write_string(self, key: str, content: str) -> JobFileInfo:
        if content is None:
            raise ValueError("content must not be None")
        return self.write_bytes(key, content.encode("utf-8"))

    def save_log(self, job_id, message: str) -> JobFileInfo:
        return self.write_string(job_file_key(job_id, LOG_FILE), message)

    def save_output(self, job_id, output) -> JobFileInfo:
        """Save a job's output from a string, bytes or a binary stream."""
        key = job_file_key(job_id, OUTPUT_FILE)
        if isinstance(output, str):
            return self.write_string(key, output)
        if isinstance(output, (bytes, bytearray)):
            return self.write_bytes(key, bytes(output))
        return self.write_stream(key, output)

    def get_logs(self, job_id) -> Optional[str]:
        info = self.get_file_info(job_file_key(job_id, LOG_FILE))
        if not info.exists:
            return None
        return info.read_text()

    def get_output(self, job_id) -> JobFileInfo:
        return self.get_file_info(job_file_key(job_id, OUTPUT_FILE))


class PhysicalJobFileProvider(JobFileProvider):
    """Job file provider backed by a directory on the local filesystem."""

    def __init__(self, root):
        """
        Initialize the provider.

        Args:
            root: Root directory; created if missing
        """
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, key: str) -> Optional[Path]:
        """Map a key to a path under the root, or None if it escapes the root."""
        if not key or "\0" in key:
            return None
        path = (self.root / key.lstrip("/\\")).resolve()
        if path == self.root or self.root not in path.parents:
            return None
        return path

    def get_file_info(self, key: str) -> JobFileInfo:
        path = self._resolve(key)
        if path is None or not path.is_file():
            return JobFileInfo(name=key, physical_path=path, exists=False)

        stat = path.stat()
        return JobFileInfo(
            name=key,
            physical_path=path,
            exists=True,
            length=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    def _writable_path(self, key: str) -> Path:
        path = self._resolve(key)
        if path is None or path.is_dir():
            raise ValueError(f"Invalid job file key: {key!r}")
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def write_bytes(self, key: str, content: bytes) -> JobFileInfo:
        if content is None:
            raise ValueError("content must not be None")
        path = self._writable_path(key)
        path.write_bytes(content)
        logger.debug(f"Wrote {len(content)} bytes to {key}")
        return self.get_file_info(key)

    def write_stream(self, key: str, content: BinaryIO) -> JobFileInfo:
        if content is None:
            raise ValueError("content must not be None")
        path = self._writable_path(key)
        with open(path, "wb") as f:
            shutil.copyfileobj(content, f)
        return self.get_file_info(key)
