"""Shared fixtures for host monitor tests."""

import pytest

from hostmon.core.exceptions import NotificationError
from hostmon.health.alerts import AlertHandler, Notifier
from hostmon.system.base import SystemInterface


class FakeSystem(SystemInterface):
    """In-memory stand-in for the host OS."""

    def __init__(
        self,
        services=None,
        filesystems=None,
        memory=None,
        top=None,
        restart_ok=True,
        restart_fixes=True,
    ):
        self.services = dict(services or {})
        self.filesystems = list(filesystems or [])
        self.memory = memory or {"total_mb": 1000, "used_mb": 500}
        self.top = list(top or [])
        self.restart_ok = restart_ok
        self.restart_fixes = restart_fixes
        self.restarts = []

    def service_is_active(self, name):
        return self.services.get(name, False)

    def service_restart(self, name):
        self.restarts.append(name)
        if self.restart_ok and self.restart_fixes:
            self.services[name] = True
        return self.restart_ok

    def list_mounted_filesystems(self):
        return self.filesystems

    def memory_stats(self):
        return self.memory

    def top_processes_by_memory(self, n):
        return self.top[:n]


class RecordingHandler(AlertHandler):
    """Alert handler that records alerts instead of sending them."""

    def __init__(self, fail=False):
        self.fail = fail
        self.alerts = []

    def send(self, alert):
        if self.fail:
            raise NotificationError("channel down")
        self.alerts.append(alert)


@pytest.fixture
def chat():
    """Recording chat handler."""
    return RecordingHandler()


@pytest.fixture
def mail():
    """Recording mail handler."""
    return RecordingHandler()


@pytest.fixture
def notifier(chat, mail):
    """Notifier wired to recording handlers."""
    return Notifier(chat=chat, mail=mail)


@pytest.fixture
def make_system():
    """Factory for FakeSystem instances."""
    return FakeSystem


@pytest.fixture
def make_handler():
    """Factory for RecordingHandler instances."""
    return RecordingHandler
