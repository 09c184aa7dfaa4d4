"""
Base class for OS capability providers.

Defines the narrow interface the probes and the recoverer use to reach
the service manager, filesystems, memory and process table.
"""

from abc import ABC, abstractmethod


class SystemInterface(ABC):
    """Abstract base class for host OS access."""

    @abstractmethod
    def service_is_active(self, name: str) -> bool:
        """
        Check whether a service is running.

        Args:
            name: Service unit name

        Returns:
            True if the service manager reports it active
        """
        pass

    @abstractmethod
    def service_restart(self, name: str) -> bool:
        """
        Restart a service.

        Args:
            name: Service unit name

        Returns:
            True if the restart command succeeded
        """
        pass

    @abstractmethod
    def list_mounted_filesystems(self) -> list[dict]:
        """
        List mounted physical filesystems.

        Returns:
            One dict per filesystem with ``mount`` and ``used_percent`` keys
        """
        pass

    @abstractmethod
    def memory_stats(self) -> dict:
        """
        Get memory totals.

        Returns:
            Dict with ``total_mb`` and ``used_mb`` keys
        """
        pass

    @abstractmethod
    def top_processes_by_memory(self, n: int) -> list[str]:
        """
        Describe the processes using the most resident memory.

        Args:
            n: Number of processes to return

        Returns:
            One formatted line per process, largest first
        """
        pass
