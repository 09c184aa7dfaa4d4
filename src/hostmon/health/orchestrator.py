"""
Health check orchestration.

Runs every configured check each cycle and aggregates the results.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from hostmon.core.config import Config, ThresholdConfig
from hostmon.health.alerts import Notifier
from hostmon.health.checks import (
    Check,
    CheckResult,
    DatabaseConnectivityCheck,
    DiskUsageCheck,
    MemoryUsageCheck,
    ServicesCheck,
)
from hostmon.health.probes import (
    ConnectivityProbe,
    DiskUsageProbe,
    MemoryUsageProbe,
    ServiceStateProbe,
)
from hostmon.health.recovery import ServiceRecoverer
from hostmon.system.base import SystemInterface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleSummary:
    """Results of one complete pass through all checks."""

    results: tuple[CheckResult, ...]
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def overall_passed(self) -> bool:
        """True only if every check passed."""
        return all(result.passed for result in self.results)

    @property
    def failed_results(self) -> list[CheckResult]:
        """Results of the checks that failed."""
        return [result for result in self.results if not result.passed]


class HealthCheckOrchestrator:
    """
    Runs the checks for one cycle.

    Checks run sequentially in the order given and a failing check never
    stops later ones. Checks send their own alerts; the orchestrator only
    sends the end-of-cycle email for services still down after recovery.
    """

    def __init__(self, checks: list[Check], notifier: Notifier):
        """
        Initialize orchestrator.

        Args:
            checks: Checks to run, in order
            notifier: Notifier for the unresolved-services email
        """
        self.checks = checks
        self.notifier = notifier

    def run_cycle(self, config: ThresholdConfig) -> CycleSummary:
        """
        Run every check once.

        Args:
            config: Thresholds and services for this cycle

        Returns:
            CycleSummary with one result per check
        """
        timestamp = datetime.now()
        results = []
        for check in self.checks:
            logger.info(f"Checking {check.description or check.name}...")
            results.append(check.run(config))

        unresolved = [name for result in results for name in result.unresolved]
        if unresolved:
            self.notifier.notify_mail(
                "Critical Services Down",
                f"The following services are not running: {' '.join(unresolved)}",
            )

        summary = CycleSummary(results=tuple(results), timestamp=timestamp)
        if summary.overall_passed:
            logger.info("=== All checks passed ✓ ===")
        else:
            failed = ", ".join(result.check_name for result in summary.failed_results)
            logger.error(f"=== Some checks failed ✗ ({failed}) ===")
        return summary


def build_checks(
    config: Config,
    system: SystemInterface,
    notifier: Notifier,
    recoverer: Optional[ServiceRecoverer] = None,
) -> list[Check]:
    """
    Create the standard checks in run order.

    Order is services, disk, memory, then database connectivity when
    enabled in config.
    """
    if recoverer is None:
        recoverer = ServiceRecoverer(system, notifier)

    checks: list[Check] = [
        ServicesCheck(ServiceStateProbe(system), recoverer),
        DiskUsageCheck(DiskUsageProbe(system), notifier),
        MemoryUsageCheck(MemoryUsageProbe(system), system, notifier),
    ]

    if config.database.enabled:
        probe = ConnectivityProbe(
            config.database.host, config.database.port, config.database.timeout
        )
        checks.append(DatabaseConnectivityCheck(probe, notifier))

    return checks


def build_orchestrator(
    config: Config,
    system: SystemInterface,
    notifier: Notifier,
) -> HealthCheckOrchestrator:
    """Create an orchestrator with the standard checks."""
    return HealthCheckOrchestrator(build_checks(config, system, notifier), notifier)
