"""Unit tests for health check orchestration."""

import pytest

from hostmon.core.config import Config, ThresholdConfig
from hostmon.health.alerts import Notifier
from hostmon.health.checks import (
    Check,
    CheckResult,
    DatabaseConnectivityCheck,
    DiskUsageCheck,
    MemoryUsageCheck,
    ServicesCheck,
    Severity,
)
from hostmon.health.orchestrator import (
    CycleSummary,
    HealthCheckOrchestrator,
    build_checks,
    build_orchestrator,
)
from hostmon.health.recovery import ServiceRecoverer


class StaticCheck(Check):
    """Check that returns a fixed result and records calls."""

    def __init__(self, name, passed, severity=None, unresolved=()):
        self.name = name
        self.passed = passed
        self.severity = severity or (Severity.INFO if passed else Severity.WARNING)
        self.unresolved = unresolved
        self.calls = 0

    def evaluate(self, config):
        self.calls += 1
        return CheckResult(
            check_name=self.name,
            passed=self.passed,
            severity=self.severity,
            detail="",
            unresolved=tuple(self.unresolved),
        )


class RaisingCheck(Check):
    name = "raising"

    def evaluate(self, config):
        raise RuntimeError("kaboom")


class TestCycleSummary:
    """Tests for CycleSummary dataclass."""

    def test_empty_summary_passes(self):
        """Test a summary with no results passes."""
        assert CycleSummary(results=()).overall_passed is True

    def test_failed_results(self):
        """Test failed results are listed."""
        bad = CheckResult.failed("disk", Severity.WARNING, "full")
        summary = CycleSummary(results=(CheckResult.ok("services", ""), bad))

        assert summary.overall_passed is False
        assert summary.failed_results == [bad]


class TestHealthCheckOrchestrator:
    """Tests for HealthCheckOrchestrator class."""

    @pytest.mark.parametrize(
        "outcomes",
        [
            [True, True, True, True],
            [True, False, True, True],
            [False, False, False, False],
            [True, True, True, False],
            [False, True, True, True],
        ],
    )
    def test_overall_is_and_of_results(self, notifier, outcomes):
        """Test overall_passed is exactly the AND of all results."""
        checks = [StaticCheck(f"c{i}", passed) for i, passed in enumerate(outcomes)]

        summary = HealthCheckOrchestrator(checks, notifier).run_cycle(ThresholdConfig())

        assert [r.passed for r in summary.results] == outcomes
        assert summary.overall_passed is all(outcomes)

    def test_failure_does_not_short_circuit(self, notifier):
        """Test every check runs even after failures and errors."""
        first = StaticCheck("first", False, Severity.ERROR)
        last = StaticCheck("last", True)
        checks = [first, RaisingCheck(), last]

        summary = HealthCheckOrchestrator(checks, notifier).run_cycle(ThresholdConfig())

        assert first.calls == 1
        assert last.calls == 1
        assert [r.check_name for r in summary.results] == ["first", "raising", "last"]
        assert summary.results[1].passed is False

    def test_unresolved_services_single_email(self, notifier, mail):
        """Test one summary email lists all unresolved services."""
        checks = [
            StaticCheck("services", False, Severity.ERROR, unresolved=("nginx", "mysql")),
            StaticCheck("disk", True),
        ]

        HealthCheckOrchestrator(checks, notifier).run_cycle(ThresholdConfig())

        assert len(mail.alerts) == 1
        assert mail.alerts[0].subject == "Critical Services Down"
        assert "nginx mysql" in mail.alerts[0].message

    def test_no_email_without_unresolved(self, notifier, chat, mail):
        """Test a passing cycle sends no alerts."""
        checks = [StaticCheck("services", True), StaticCheck("disk", True)]

        summary = HealthCheckOrchestrator(checks, notifier).run_cycle(ThresholdConfig())

        assert summary.overall_passed is True
        assert chat.alerts == []
        assert mail.alerts == []

    def test_failing_channels_do_not_abort_cycle(self, make_system, make_handler):
        """Test broken alert channels leave results unaffected."""
        system = make_system(
            services={"nginx": False},
            filesystems=[{"mount": "/", "used_percent": 99}],
            memory={"total_mb": 100, "used_mb": 99},
            restart_fixes=False,
        )
        notifier = Notifier(chat=make_handler(fail=True), mail=make_handler(fail=True))
        config = Config.from_dict({"critical_services": ["nginx"]})
        recoverer = ServiceRecoverer(system, notifier, sleep=lambda s: None)
        checks = build_checks(config, system, notifier, recoverer=recoverer)

        summary = HealthCheckOrchestrator(checks, notifier).run_cycle(config.thresholds)

        assert [r.check_name for r in summary.results] == ["services", "disk", "memory"]
        assert [r.severity for r in summary.results] == [
            Severity.ERROR,
            Severity.WARNING,
            Severity.WARNING,
        ]
        assert summary.overall_passed is False


class TestEndToEndCycle:
    """Cycle scenarios over a fake host."""

    def _run(self, system, notifier, config):
        recoverer = ServiceRecoverer(system, notifier, sleep=lambda s: None)
        checks = build_checks(config, system, notifier, recoverer=recoverer)
        return HealthCheckOrchestrator(checks, notifier).run_cycle(config.thresholds)

    def test_healthy_host_sends_no_alerts(self, make_system, notifier, chat, mail):
        """Test a healthy host passes with zero alerts."""
        system = make_system(
            services={"nginx": True, "mysql": True, "redis": True, "docker": True},
            filesystems=[{"mount": "/", "used_percent": 40}],
            memory={"total_mb": 1000, "used_mb": 300},
        )

        summary = self._run(system, notifier, Config())

        assert summary.overall_passed is True
        assert chat.alerts == []
        assert mail.alerts == []

    def test_redis_recovered(self, make_system, notifier, chat, mail):
        """Test redis down then restarted: failed result, one chat alert, no email."""
        system = make_system(
            services={"nginx": True, "mysql": True, "redis": False, "docker": True},
            filesystems=[{"mount": "/", "used_percent": 40}],
            memory={"total_mb": 1000, "used_mb": 300},
        )

        summary = self._run(system, notifier, Config())

        services = summary.results[0]
        assert services.check_name == "services"
        assert services.passed is False
        assert services.remediation_succeeded is True
        assert system.restarts == ["redis"]
        assert len(chat.alerts) == 1
        assert "redis" in chat.alerts[0].message
        assert mail.alerts == []
        assert summary.overall_passed is False

    def test_repeated_failure_alerts_each_cycle(self, make_system, notifier, chat):
        """Test a persistent problem alerts again in the next cycle."""
        system = make_system(
            services={},
            filesystems=[{"mount": "/", "used_percent": 95}],
        )
        config = Config.from_dict({"critical_services": []})

        self._run(system, notifier, config)
        self._run(system, notifier, config)

        assert len(chat.alerts) == 2
        assert chat.alerts[0].message == chat.alerts[1].message


class TestBuildChecks:
    """Tests for the check factory."""

    def test_default_order(self, make_system, notifier):
        """Test checks are built in services, disk, memory order."""
        checks = build_checks(Config(), make_system(), notifier)

        assert [type(c) for c in checks] == [ServicesCheck, DiskUsageCheck, MemoryUsageCheck]

    def test_database_check_enabled(self, make_system, notifier):
        """Test the database check is appended when enabled."""
        config = Config.from_dict({"database": {"enabled": True, "port": 5432}})

        checks = build_checks(config, make_system(), notifier)

        assert isinstance(checks[-1], DatabaseConnectivityCheck)
        assert checks[-1].probe.port == 5432

    def test_build_orchestrator(self, make_system, notifier):
        """Test the orchestrator is wired with the notifier."""
        orchestrator = build_orchestrator(Config(), make_system(), notifier)

        assert orchestrator.notifier is notifier
        assert len(orchestrator.checks) == 3
