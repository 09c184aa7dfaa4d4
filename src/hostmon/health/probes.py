"""
Resource probes for the host monitor.

Each probe performs one query against the host and returns a structured
reading. Probes do not compare against thresholds.
"""

import logging
import socket
from dataclasses import dataclass

from hostmon.core.exceptions import ProbeError
from hostmon.system.base import SystemInterface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceState:
    """Running state of a single service."""

    name: str
    running: bool


@dataclass(frozen=True)
class PartitionUsage:
    """Usage of one mounted filesystem."""

    mount_point: str
    used_percent: int


@dataclass(frozen=True)
class MemoryReading:
    """Memory totals and the derived usage percentage."""

    total_mb: int
    used_mb: int
    used_percent: int


@dataclass(frozen=True)
class ConnectivityReading:
    """Result of a TCP reachability probe."""

    host: str
    port: int
    reachable: bool
    message: str


class ServiceStateProbe:
    """Queries the service manager for one service's state."""

    def __init__(self, system: SystemInterface):
        self.system = system

    def read(self, name: str) -> ServiceState:
        """
        Get the state of a service.

        Any failure to query is reported as not running.
        """
        try:
            running = bool(self.system.service_is_active(name))
        except Exception as e:
            logger.warning(f"Could not query state of {name}: {e}")
            running = False
        return ServiceState(name=name, running=running)


class DiskUsageProbe:
    """Reads usage of all mounted physical filesystems."""

    def __init__(self, system: SystemInterface):
        self.system = system

    def read(self) -> list[PartitionUsage]:
        """
        Get usage per partition.

        Malformed entries are skipped.

        Raises:
            ProbeError: If the filesystem listing cannot be obtained
        """
        try:
            entries = self.system.list_mounted_filesystems()
        except Exception as e:
            raise ProbeError(f"Cannot list filesystems: {e}") from e

        if entries is None:
            raise ProbeError("Filesystem listing returned nothing")

        partitions = []
        for entry in entries:
            partition = self._parse_entry(entry)
            if partition is None:
                logger.debug(f"Skipping malformed filesystem entry: {entry!r}")
                continue
            partitions.append(partition)
        return partitions

    @staticmethod
    def _parse_entry(entry) -> "PartitionUsage | None":
        try:
            mount = entry["mount"]
            percent = int(str(entry["used_percent"]).rstrip("%"))
        except (KeyError, TypeError, ValueError):
            return None
        if not mount or not 0 <= percent <= 100:
            return None
        return PartitionUsage(mount_point=str(mount), used_percent=percent)


class MemoryUsageProbe:
    """Reads memory totals and computes the usage percentage."""

    def __init__(self, system: SystemInterface):
        self.system = system

    def read(self) -> MemoryReading:
        """
        Get memory usage.

        Raises:
            ProbeError: If stats are unreadable or total memory is zero
        """
        try:
            stats = self.system.memory_stats()
            total_mb = int(stats["total_mb"])
            used_mb = int(stats["used_mb"])
        except Exception as e:
            raise ProbeError(f"Cannot read memory stats: {e}") from e

        if total_mb <= 0:
            raise ProbeError(f"Total memory reported as {total_mb}MB")

        return MemoryReading(
            total_mb=total_mb,
            used_mb=used_mb,
            used_percent=used_mb * 100 // total_mb,
        )


class ConnectivityProbe:
    """Checks whether a TCP service accepts connections."""

    def __init__(self, host: str, port: int, timeout: float = 5.0):
        """
        Initialize connectivity probe.

        Args:
            host: Host address of the dependency
            port: TCP port number
            timeout: Connect timeout in seconds
        """
        self.host = host
        self.port = port
        self.timeout = timeout

    def read(self) -> ConnectivityReading:
        """Attempt a TCP connection and report the outcome."""
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            sock.settimeout(self.timeout)
            try:
                sock.connect((self.host, self.port))
            finally:
                sock.close()
            return self._reading(True, f"{self.host}:{self.port} is responding")
        except socket.timeout:
            return self._reading(False, f"Connection to {self.host}:{self.port} timed out")
        except ConnectionRefusedError:
            return self._reading(False, f"Connection to {self.host}:{self.port} refused")
        except OSError as e:
            return self._reading(False, f"Connection to {self.host}:{self.port} failed: {e}")

    def _reading(self, reachable: bool, message: str) -> ConnectivityReading:
        return ConnectivityReading(
            host=self.host, port=self.port, reachable=reachable, message=message
        )
