"""
Monitoring daemon for the host monitor.

Runs the orchestrator once or on a fixed interval until stopped.
"""

import logging
import signal
import threading
import time
from typing import Optional

from hostmon.core.config import ThresholdConfig
from hostmon.health.orchestrator import CycleSummary, HealthCheckOrchestrator

logger = logging.getLogger(__name__)


class MonitorDaemon:
    """
    Monitoring daemon that runs periodic health checks.

    A stop request (stop() or SIGTERM/SIGINT) takes effect between cycles;
    a cycle in progress always completes.
    """

    def __init__(
        self,
        orchestrator: HealthCheckOrchestrator,
        config: ThresholdConfig,
        interval: Optional[int] = None,
    ):
        """
        Initialize monitoring daemon.

        Args:
            orchestrator: Orchestrator that runs the checks
            config: Thresholds passed to every cycle
            interval: Seconds between cycles (default: config.poll_interval_seconds)
        """
        self.orchestrator = orchestrator
        self.config = config
        self.interval = config.poll_interval_seconds if interval is None else interval

        self._running = False
        self._stop_event = threading.Event()
        self.cycles = 0

    def run_once(self) -> CycleSummary:
        """
        Run a single health check cycle.

        Returns:
            Summary of the cycle
        """
        summary = self.orchestrator.run_cycle(self.config)
        self.cycles += 1
        return summary

    def start(self) -> None:
        """
        Start the monitoring loop.

        Runs until stop() is called or SIGTERM/SIGINT is received. A failed
        cycle is logged and the loop continues.
        """
        self._running = True
        self._stop_event.clear()

        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, stopping after current cycle...")
            self.stop()

        previous_handlers = {
            sig: signal.signal(sig, signal_handler)
            for sig in (signal.SIGTERM, signal.SIGINT)
        }

        logger.info(f"Running in continuous mode every {self.interval}s (Ctrl+C to stop)")

        try:
            while self._running:
                start_time = time.time()
                try:
                    summary = self.run_once()
                    elapsed = time.time() - start_time
                    logger.debug(
                        f"Cycle {self.cycles} completed in {elapsed:.2f}s "
                        f"(passed={summary.overall_passed})"
                    )
                except Exception as e:
                    logger.error(f"Error during health check: {e}")
                    elapsed = time.time() - start_time

                if not self._running:
                    break

                sleep_time = max(0, self.interval - elapsed)
                logger.info(f"Sleeping for {sleep_time:.0f}s...")
                self._stop_event.wait(sleep_time)
        finally:
            for sig, handler in previous_handlers.items():
                signal.signal(sig, handler)
            self._running = False

        logger.info("Monitor daemon stopped")

    def stop(self) -> None:
        """Stop the daemon after the current cycle."""
        self._running = False
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        """Check if daemon is running."""
        return self._running


def format_summary_table(summary: CycleSummary, show_details: bool = False) -> str:
    """
    Format a cycle summary as a table.

    Args:
        summary: Cycle summary to format
        show_details: Show multi-line details in full

    Returns:
        Formatted table string
    """
    if not summary.results:
        return "No checks configured."

    lines = []
    header = f"{'CHECK':<12} {'STATUS':<8} {'SEVERITY':<10} {'DETAIL'}"
    lines.append(header)
    lines.append("-" * 60)

    for result in summary.results:
        detail_lines = result.detail.splitlines() or [""]
        lines.append(
            f"{result.check_name:<12} {result.status_char:<8} "
            f"{result.severity.value:<10} {detail_lines[0]}"
        )
        if show_details:
            for extra in detail_lines[1:]:
                lines.append(f"  {extra}")

    lines.append("")
    overall = "PASSED" if summary.overall_passed else "FAILED"
    lines.append(f"Overall: {overall}")
    return "\n".join(lines)
