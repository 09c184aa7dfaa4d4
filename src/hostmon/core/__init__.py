"""
Core components for the host monitor.

Provides configuration, error types, and process setup.
"""

from hostmon.core.config import (
    AlertChannelConfig,
    Config,
    DatabaseCheckConfig,
    ThresholdConfig,
    load_config,
)
from hostmon.core.exceptions import (
    HostmonError,
    NotificationError,
    ProbeError,
    RemediationError,
    StartupError,
)

__all__ = [
    "Config",
    "ThresholdConfig",
    "AlertChannelConfig",
    "DatabaseCheckConfig",
    "load_config",
    "HostmonError",
    "ProbeError",
    "RemediationError",
    "NotificationError",
    "StartupError",
]
