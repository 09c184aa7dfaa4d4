"""
Health check implementations for the host monitor.

Provides service, disk, memory and database connectivity checks. Every
check returns a CheckResult from run(); probe failures and unexpected
errors become failed results instead of propagating.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from hostmon.core.config import ThresholdConfig
from hostmon.core.exceptions import ProbeError
from hostmon.health.alerts import Notifier
from hostmon.health.probes import (
    ConnectivityProbe,
    DiskUsageProbe,
    MemoryUsageProbe,
    ServiceStateProbe,
)
from hostmon.health.recovery import ServiceRecoverer
from hostmon.system.base import SystemInterface

logger = logging.getLogger(__name__)

TOP_PROCESS_COUNT = 5


class Severity(Enum):
    """Check result severity."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class CheckResult:
    """
    Result of a single check.

    INFO severity means passed; WARNING and ERROR mean failed.
    """

    check_name: str
    passed: bool
    severity: Severity
    detail: str
    remediation_attempted: bool = False
    remediation_succeeded: Optional[bool] = None
    unresolved: tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if self.passed != (self.severity == Severity.INFO):
            raise ValueError(
                f"Inconsistent result for {self.check_name}: "
                f"passed={self.passed} with severity {self.severity.value}"
            )

    @property
    def status_char(self) -> str:
        """Get single character status indicator."""
        if self.passed:
            return "\u2713"  # checkmark
        return "\u2717"  # X mark

    @classmethod
    def ok(cls, check_name: str, detail: str) -> "CheckResult":
        """Build a passing result."""
        return cls(check_name=check_name, passed=True, severity=Severity.INFO, detail=detail)

    @classmethod
    def failed(
        cls, check_name: str, severity: Severity, detail: str, **kwargs
    ) -> "CheckResult":
        """Build a failing result."""
        return cls(
            check_name=check_name, passed=False, severity=severity, detail=detail, **kwargs
        )


class Check(ABC):
    """Abstract base class for checks."""

    name: str = "check"
    description: str = ""
    failure_severity: Severity = Severity.ERROR

    def run(self, config: ThresholdConfig) -> CheckResult:
        """
        Run the check.

        Never raises; probe errors and unexpected exceptions produce a
        failed result with this check's failure severity.
        """
        try:
            return self.evaluate(config)
        except ProbeError as e:
            logger.error(f"  {self.name}: probe error: {e}")
            return CheckResult.failed(
                self.name, self.failure_severity, f"probe error: {e}"
            )
        except Exception as e:
            logger.exception(f"  {self.name}: unexpected error")
            return CheckResult.failed(
                self.name, self.failure_severity, f"check error: {e}"
            )

    @abstractmethod
    def evaluate(self, config: ThresholdConfig) -> CheckResult:
        """Probe, compare and classify."""
        pass


class ServicesCheck(Check):
    """
    Checks that every critical service is running.

    A stopped service is restarted once. A successful restart is reported
    with a chat alert but the result still records the failure.
    """

    name = "services"
    description = "critical services"
    failure_severity = Severity.ERROR

    def __init__(self, probe: ServiceStateProbe, recoverer: ServiceRecoverer):
        self.probe = probe
        self.recoverer = recoverer

    def evaluate(self, config: ThresholdConfig) -> CheckResult:
        self.recoverer.reset()
        failed: list[str] = []
        recovered: list[str] = []
        unresolved: list[str] = []

        for service in config.critical_services:
            if self.probe.read(service).running:
                logger.info(f"  {service} is running")
                continue

            logger.error(f"  {service} is not running")
            failed.append(service)
            outcome = self.recoverer.attempt_recovery(service)
            if outcome.succeeded:
                recovered.append(service)
            else:
                unresolved.append(service)

        if not failed:
            return CheckResult.ok(
                self.name, f"all {len(config.critical_services)} services running"
            )

        detail = f"not running: {', '.join(failed)}"
        if recovered:
            detail += f"; auto-restarted: {', '.join(recovered)}"
        if unresolved:
            detail += f"; still down: {', '.join(unresolved)}"

        return CheckResult.failed(
            self.name,
            Severity.ERROR,
            detail,
            remediation_attempted=True,
            remediation_succeeded=not unresolved,
            unresolved=tuple(unresolved),
        )


class DiskUsageCheck(Check):
    """
    Checks every physical partition against the disk threshold.

    Over-threshold partitions each get their own chat alert. Nothing is
    cleaned up automatically.
    """

    name = "disk"
    description = "disk usage"
    failure_severity = Severity.WARNING

    def __init__(self, probe: DiskUsageProbe, notifier: Notifier):
        self.probe = probe
        self.notifier = notifier

    def evaluate(self, config: ThresholdConfig) -> CheckResult:
        threshold = config.disk_threshold_percent
        over: list[str] = []
        usage: list[str] = []

        for partition in self.probe.read():
            entry = f"{partition.mount_point}: {partition.used_percent}%"
            usage.append(entry)
            if partition.used_percent > threshold:
                logger.warning(f"  High disk usage on {entry}")
                self.notifier.notify_chat(
                    f"High disk usage on {partition.mount_point}: "
                    f"{partition.used_percent}% (threshold: {threshold}%)"
                )
                over.append(entry)
            else:
                logger.info(f"  {entry} used")

        if over:
            return CheckResult.failed(
                self.name,
                Severity.WARNING,
                f"over {threshold}% threshold: {', '.join(over)}",
            )
        return CheckResult.ok(self.name, ", ".join(usage) or "no partitions found")


class MemoryUsageCheck(Check):
    """Checks memory usage; on failure reports the top memory consumers."""

    name = "memory"
    description = "memory usage"
    failure_severity = Severity.WARNING

    def __init__(self, probe: MemoryUsageProbe, system: SystemInterface, notifier: Notifier):
        self.probe = probe
        self.system = system
        self.notifier = notifier

    def evaluate(self, config: ThresholdConfig) -> CheckResult:
        threshold = config.memory_threshold_percent
        reading = self.probe.read()
        logger.info(
            f"  Memory usage: {reading.used_percent}% "
            f"({reading.used_mb}MB/{reading.total_mb}MB)"
        )

        if reading.used_percent <= threshold:
            return CheckResult.ok(
                self.name,
                f"{reading.used_percent}% used ({reading.used_mb}MB/{reading.total_mb}MB)",
            )

        logger.warning(f"  High memory usage: {reading.used_percent}%")
        top_processes = self._top_processes()
        self.notifier.notify_chat(
            f"High memory usage: {reading.used_percent}%\n\nTop processes:\n{top_processes}"
        )
        return CheckResult.failed(
            self.name,
            Severity.WARNING,
            f"{reading.used_percent}% used exceeds {threshold}% threshold\n"
            f"Top processes:\n{top_processes}",
        )

    def _top_processes(self) -> str:
        try:
            return "\n".join(self.system.top_processes_by_memory(TOP_PROCESS_COUNT))
        except Exception as e:
            logger.warning(f"  Could not list top processes: {e}")
            return "(unavailable)"


class DatabaseConnectivityCheck(Check):
    """
    Checks that a dependent database accepts connections.

    Failures are escalated through the mail channel.
    """

    name = "database"
    description = "database connectivity"
    failure_severity = Severity.ERROR

    def __init__(self, probe: ConnectivityProbe, notifier: Notifier):
        self.probe = probe
        self.notifier = notifier

    def evaluate(self, config: ThresholdConfig) -> CheckResult:
        reading = self.probe.read()
        if reading.reachable:
            logger.info(f"  Database is responding on {reading.host}:{reading.port}")
            return CheckResult.ok(self.name, reading.message)

        logger.error(f"  Database is not responding: {reading.message}")
        self.notifier.notify_mail(
            "Database Connection Failed",
            f"Unable to connect to database on {reading.host}:{reading.port}\n"
            f"{reading.message}",
        )
        return CheckResult.failed(self.name, Severity.ERROR, reading.message)
