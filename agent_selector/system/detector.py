"""Local node detection."""

import logging
import platform
import socket
from dataclasses import dataclass

import psutil

logger = logging.getLogger(__name__)


@dataclass
class NodeInfo:
    """Resources of the machine the selector runs on."""

    hostname: str
    platform: str
    cpu_count: int
    total_memory_gb: float
    available_memory_gb: float

    def __str__(self) -> str:
        return (
            f"{self.hostname} ({self.platform}): "
            f"{self.cpu_count} executors, "
            f"{self.available_memory_gb:.1f}GB available / "
            f"{self.total_memory_gb:.1f}GB total"
        )


class NodeDetector:
    """Detects the local machine as a build node."""

    def detect(self) -> NodeInfo:
        """Detect current node resources."""
        memory = psutil.virtual_memory()
        return NodeInfo(
            hostname=self._get_hostname(),
            platform=platform.system().lower() or "unknown",
            cpu_count=self._get_cpu_count(),
            total_memory_gb=memory.total / (1024**3),
            available_memory_gb=memory.available / (1024**3),
        )

    def _get_hostname(self) -> str:
        """Get the short host name."""
        hostname = socket.gethostname()
        return hostname.split(".")[0] or "localhost"

    def _get_cpu_count(self) -> int:
        """Get the number of logical CPUs, used as the executor count."""
        count = psutil.cpu_count(logical=True)
        if not count:
            logger.warning("Could not determine CPU count, assuming one executor")
            return 1
        return count
