"""
Automatic service recovery.

Restarts a failed service once per cycle and reports whether it came back.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from hostmon.core.exceptions import RemediationError
from hostmon.health.alerts import AlertLevel, Notifier
from hostmon.health.probes import ServiceStateProbe
from hostmon.system.base import SystemInterface

logger = logging.getLogger(__name__)

SETTLE_SECONDS = 2.0


@dataclass(frozen=True)
class RecoveryOutcome:
    """Outcome of a recovery attempt."""

    service: str
    attempted: bool
    succeeded: bool
    message: str = ""


class ServiceRecoverer:
    """
    Restart-and-reverify for failed services.

    Outcomes are remembered until reset() so a service is never restarted
    twice in the same cycle.
    """

    def __init__(
        self,
        system: SystemInterface,
        notifier: Optional[Notifier] = None,
        settle_seconds: float = SETTLE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize service recoverer.

        Args:
            system: OS access used for restart and re-query
            notifier: Notifier for "recovered" chat alerts
            settle_seconds: Wait between restart and re-check
            sleep: Sleep function (injectable for tests)
        """
        self.system = system
        self.probe = ServiceStateProbe(system)
        self.notifier = notifier
        self.settle_seconds = settle_seconds
        self._sleep = sleep
        self._outcomes: dict[str, RecoveryOutcome] = {}

    def reset(self) -> None:
        """Start a new cycle, allowing one more attempt per service."""
        self._outcomes.clear()

    def attempt_recovery(self, service_name: str) -> RecoveryOutcome:
        """
        Restart a service and verify it is running.

        Args:
            service_name: Service to restart

        Returns:
            RecoveryOutcome; a repeat call in the same cycle returns the
            first outcome without restarting again
        """
        previous = self._outcomes.get(service_name)
        if previous is not None:
            logger.warning(
                f"  Recovery of {service_name} already attempted this cycle, not retrying"
            )
            return previous

        outcome = self._recover(service_name)
        self._outcomes[service_name] = outcome

        if outcome.succeeded and self.notifier is not None:
            self.notifier.notify_chat(
                f"{service_name} was down but has been automatically restarted",
                level=AlertLevel.INFO,
            )
        return outcome

    def _recover(self, service_name: str) -> RecoveryOutcome:
        logger.info(f"  Attempting to restart {service_name}...")
        try:
            self._restart(service_name)
        except RemediationError as e:
            logger.error(f"  Failed to restart {service_name}: {e}")
            return RecoveryOutcome(
                service=service_name, attempted=True, succeeded=False, message=str(e)
            )

        self._sleep(self.settle_seconds)

        if self.probe.read(service_name).running:
            logger.info(f"  Successfully restarted {service_name}")
            return RecoveryOutcome(
                service=service_name,
                attempted=True,
                succeeded=True,
                message="restarted",
            )

        logger.error(f"  Failed to restart {service_name}: still not running")
        return RecoveryOutcome(
            service=service_name,
            attempted=True,
            succeeded=False,
            message="still not running after restart",
        )

    def _restart(self, service_name: str) -> None:
        try:
            ok = self.system.service_restart(service_name)
        except Exception as e:
            raise RemediationError(f"restart command error: {e}") from e
        if not ok:
            raise RemediationError("restart command failed")
