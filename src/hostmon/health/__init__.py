"""
Health monitoring module for the host monitor.

Provides probes, checks, service recovery, alerting and the runner.
"""

from hostmon.health.alerts import (
    Alert,
    AlertHandler,
    AlertLevel,
    EmailAlertHandler,
    Notifier,
    WebhookAlertHandler,
)
from hostmon.health.checks import (
    Check,
    CheckResult,
    DatabaseConnectivityCheck,
    DiskUsageCheck,
    MemoryUsageCheck,
    ServicesCheck,
    Severity,
)
from hostmon.health.daemon import MonitorDaemon, format_summary_table
from hostmon.health.orchestrator import (
    CycleSummary,
    HealthCheckOrchestrator,
    build_checks,
    build_orchestrator,
)
from hostmon.health.recovery import RecoveryOutcome, ServiceRecoverer

__all__ = [
    # Checks
    "Severity",
    "CheckResult",
    "Check",
    "ServicesCheck",
    "DiskUsageCheck",
    "MemoryUsageCheck",
    "DatabaseConnectivityCheck",
    # Recovery
    "RecoveryOutcome",
    "ServiceRecoverer",
    # Alerts
    "Alert",
    "AlertLevel",
    "AlertHandler",
    "WebhookAlertHandler",
    "EmailAlertHandler",
    "Notifier",
    # Orchestration
    "CycleSummary",
    "HealthCheckOrchestrator",
    "build_checks",
    "build_orchestrator",
    # Daemon
    "MonitorDaemon",
    "format_summary_table",
]
