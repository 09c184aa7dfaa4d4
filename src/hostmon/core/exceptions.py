"""
Exception types for the host monitor.

Only StartupError is allowed to end the process; the others are caught
at the check or notifier boundary and turned into results or log lines.
"""


class HostmonError(Exception):
    """Base class for host monitor errors."""


class ProbeError(HostmonError):
    """An OS query failed or returned data that could not be parsed."""


class RemediationError(HostmonError):
    """A restart command failed or did not bring the service back up."""


class NotificationError(HostmonError):
    """An alert channel failed to deliver a message."""


class StartupError(HostmonError):
    """Fatal condition detected before any check runs."""
