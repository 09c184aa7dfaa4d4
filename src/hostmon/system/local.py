"""
Local host implementation of the OS capabilities.

Uses systemctl for services and psutil for disk, memory and processes.
"""

import logging
import math
import subprocess

import psutil

from hostmon.system.base import SystemInterface

logger = logging.getLogger(__name__)

MB = 1024 * 1024


class LocalSystem(SystemInterface):
    """
    System access for the machine the monitor runs on.

    Service control shells out to systemd:
    - Status:  systemctl is-active --quiet <name>
    - Restart: systemctl restart <name>
    """

    def __init__(self, command_timeout: float = 30.0):
        """
        Initialize local system access.

        Args:
            command_timeout: Timeout for systemctl commands in seconds
        """
        self.command_timeout = command_timeout

    def _systemctl(self, *args: str) -> int:
        """Run systemctl and return its exit status."""
        result = subprocess.run(
            ["systemctl", *args],
            capture_output=True,
            timeout=self.command_timeout,
        )
        return result.returncode

    def service_is_active(self, name: str) -> bool:
        """Check service state via systemctl is-active."""
        return self._systemctl("is-active", "--quiet", name) == 0

    def service_restart(self, name: str) -> bool:
        """Restart service via systemctl restart."""
        return self._systemctl("restart", name) == 0

    def list_mounted_filesystems(self) -> list[dict]:
        """List /dev-backed mounts, excluding /boot, with df-style percentages."""
        filesystems = []
        for partition in psutil.disk_partitions(all=False):
            if not partition.device.startswith("/dev/"):
                continue
            if partition.mountpoint == "/boot" or partition.mountpoint.startswith("/boot/"):
                continue
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except (PermissionError, OSError) as e:
                logger.debug(f"Skipping {partition.mountpoint}: {e}")
                continue
            # df rounds the percentage up
            filesystems.append(
                {
                    "mount": partition.mountpoint,
                    "used_percent": math.ceil(usage.percent),
                }
            )
        return filesystems

    def memory_stats(self) -> dict:
        """Get total and used memory in MiB."""
        memory = psutil.virtual_memory()
        return {
            "total_mb": memory.total // MB,
            "used_mb": memory.used // MB,
        }

    def top_processes_by_memory(self, n: int) -> list[str]:
        """Format the n largest processes by resident set size."""
        processes = []
        for proc in psutil.process_iter(
            ["pid", "name", "username", "memory_percent", "memory_info"]
        ):
            info = proc.info
            if info.get("memory_info") is None:
                continue
            processes.append(info)

        processes.sort(key=lambda p: p["memory_info"].rss, reverse=True)

        lines = []
        for info in processes[:n]:
            lines.append(
                f"{info.get('username') or '-':<12} {info['pid']:>7} "
                f"{info.get('memory_percent') or 0.0:>5.1f}% "
                f"{info['memory_info'].rss // MB:>7}MB {info.get('name') or '?'}"
            )
        return lines
