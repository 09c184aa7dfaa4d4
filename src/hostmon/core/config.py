"""
Configuration management for the host monitor.

Loads configuration from YAML files with environment variable overrides.
All configuration objects are frozen; they are built once at startup and
shared read-only by the checks.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from hostmon.core.exceptions import StartupError


# Default configuration paths
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "hostmon"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
SYSTEM_CONFIG_FILE = Path("/etc/hostmon/config.yaml")
DEFAULT_LOG_DIR = Path("/var/log/monitoring")

DEFAULT_CRITICAL_SERVICES = ("nginx", "mysql", "redis", "docker")


def _ordered_unique(names: Iterable[str]) -> tuple[str, ...]:
    """Drop duplicate names, keeping the first occurrence."""
    seen: dict[str, None] = {}
    for name in names:
        name = str(name).strip()
        if name:
            seen.setdefault(name, None)
    return tuple(seen)


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be a mapping, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class ThresholdConfig:
    """Thresholds and the set of services checked every cycle."""

    disk_threshold_percent: int = 85
    memory_threshold_percent: int = 90
    # Loaded and reported, but no check reads it yet.
    cpu_threshold_percent: int = 80
    critical_services: tuple[str, ...] = DEFAULT_CRITICAL_SERVICES
    poll_interval_seconds: int = 300

    def __post_init__(self):
        for name in (
            "disk_threshold_percent",
            "memory_threshold_percent",
            "cpu_threshold_percent",
        ):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be between 0 and 100, got {value}")
        if self.poll_interval_seconds < 0:
            raise ValueError(
                f"poll_interval_seconds must not be negative, got {self.poll_interval_seconds}"
            )
        services = self.critical_services
        if isinstance(services, str):
            services = (services,)
        elif not isinstance(services, (list, tuple)):
            raise ValueError(
                f"critical_services must be a list of names, got {type(services).__name__}"
            )
        object.__setattr__(self, "critical_services", _ordered_unique(services))


@dataclass(frozen=True)
class AlertChannelConfig:
    """Endpoints for the chat and email alert channels."""

    email: str = ""
    webhook_url: str = ""
    smtp_host: str = "localhost"
    smtp_port: int = 25
    sender: str = "hostmon@localhost"
    smtp_starttls: bool = False
    smtp_username: str = ""
    smtp_password: str = ""
    timeout: float = 10.0


@dataclass(frozen=True)
class DatabaseCheckConfig:
    """Database connectivity check settings (disabled by default)."""

    enabled: bool = False
    host: str = "localhost"
    port: int = 3306
    timeout: float = 5.0


@dataclass(frozen=True)
class Config:
    """Main configuration for the host monitor."""

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    alerts: AlertChannelConfig = field(default_factory=AlertChannelConfig)
    database: DatabaseCheckConfig = field(default_factory=DatabaseCheckConfig)
    log_dir: Path = DEFAULT_LOG_DIR
    log_level: str = "INFO"
    require_root: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Create Config from dictionary.

        Raises:
            StartupError: If a value has the wrong type or is out of range
        """
        if not isinstance(data, dict):
            raise StartupError("Invalid configuration: top level must be a mapping")
        try:
            return cls._build(data)
        except (TypeError, ValueError) as e:
            raise StartupError(f"Invalid configuration: {e}") from e

    @classmethod
    def _build(cls, data: dict[str, Any]) -> "Config":
        threshold_data = _section(data, "thresholds")
        alert_data = _section(data, "alerts")
        database_data = _section(data, "database")

        thresholds = ThresholdConfig(
            disk_threshold_percent=int(threshold_data.get("disk_threshold_percent", 85)),
            memory_threshold_percent=int(
                threshold_data.get("memory_threshold_percent", 90)
            ),
            cpu_threshold_percent=int(threshold_data.get("cpu_threshold_percent", 80)),
            critical_services=(
                data.get("critical_services", DEFAULT_CRITICAL_SERVICES) or ()
            ),
            poll_interval_seconds=int(threshold_data.get("poll_interval_seconds", 300)),
        )

        alerts = AlertChannelConfig(
            email=alert_data.get("email", "") or "",
            webhook_url=alert_data.get("webhook_url", "") or "",
            smtp_host=alert_data.get("smtp_host", "localhost"),
            smtp_port=int(alert_data.get("smtp_port", 25)),
            sender=alert_data.get("sender", "hostmon@localhost"),
            smtp_starttls=bool(alert_data.get("smtp_starttls", False)),
            smtp_username=alert_data.get("smtp_username", "") or "",
            smtp_password=alert_data.get("smtp_password", "") or "",
            timeout=float(alert_data.get("timeout", 10.0)),
        )

        database = DatabaseCheckConfig(
            enabled=bool(database_data.get("enabled", False)),
            host=database_data.get("host", "localhost"),
            port=int(database_data.get("port", 3306)),
            timeout=float(database_data.get("timeout", 5.0)),
        )

        return cls(
            thresholds=thresholds,
            alerts=alerts,
            database=database,
            log_dir=Path(data.get("log_dir", str(DEFAULT_LOG_DIR))),
            log_level=data.get("log_level", "INFO"),
            require_root=bool(data.get("require_root", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert Config to dictionary."""
        return {
            "thresholds": {
                "disk_threshold_percent": self.thresholds.disk_threshold_percent,
                "memory_threshold_percent": self.thresholds.memory_threshold_percent,
                "cpu_threshold_percent": self.thresholds.cpu_threshold_percent,
                "poll_interval_seconds": self.thresholds.poll_interval_seconds,
            },
            "critical_services": list(self.thresholds.critical_services),
            "alerts": {
                "email": self.alerts.email,
                "webhook_url": self.alerts.webhook_url,
                "smtp_host": self.alerts.smtp_host,
                "smtp_port": self.alerts.smtp_port,
                "sender": self.alerts.sender,
                "smtp_starttls": self.alerts.smtp_starttls,
                "smtp_username": self.alerts.smtp_username,
                "smtp_password": self.alerts.smtp_password,
                "timeout": self.alerts.timeout,
            },
            "database": {
                "enabled": self.database.enabled,
                "host": self.database.host,
                "port": self.database.port,
                "timeout": self.database.timeout,
            },
            "log_dir": str(self.log_dir),
            "log_level": self.log_level,
            "require_root": self.require_root,
        }


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML file.

    Search order:
    1. Explicit path if provided
    2. HOSTMON_CONFIG environment variable
    3. ~/.config/hostmon/config.yaml
    4. /etc/hostmon/config.yaml
    5. Default values

    Environment variable overrides:
    - HOSTMON_LOG_DIR: Override log_dir
    - HOSTMON_LOG_LEVEL: Override log_level
    - HOSTMON_WEBHOOK_URL: Override alerts.webhook_url
    - HOSTMON_ALERT_EMAIL: Override alerts.email
    - HOSTMON_POLL_INTERVAL: Override thresholds.poll_interval_seconds

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Loaded configuration

    Raises:
        StartupError: If the explicit file cannot be read or parsed, or any
            value is invalid. Unreadable files found by the search are skipped.
    """
    if config_path:
        paths_to_try = [config_path]
    else:
        env_path = os.environ.get("HOSTMON_CONFIG")
        paths_to_try = []
        if env_path:
            paths_to_try.append(Path(env_path))
        paths_to_try.extend([DEFAULT_CONFIG_FILE, SYSTEM_CONFIG_FILE])

    config_data = {}
    for path in paths_to_try:
        if path.exists():
            try:
                with open(path) as f:
                    config_data = yaml.safe_load(f) or {}
                break
            except (OSError, yaml.YAMLError) as e:
                if config_path:
                    raise StartupError(f"Cannot read config file {path}: {e}") from e
                continue

    config = Config.from_dict(config_data)
    return _apply_env_overrides(config)


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    if "HOSTMON_LOG_DIR" in os.environ:
        config = replace(config, log_dir=Path(os.environ["HOSTMON_LOG_DIR"]))

    if "HOSTMON_LOG_LEVEL" in os.environ:
        config = replace(config, log_level=os.environ["HOSTMON_LOG_LEVEL"])

    if "HOSTMON_WEBHOOK_URL" in os.environ:
        config = replace(
            config,
            alerts=replace(config.alerts, webhook_url=os.environ["HOSTMON_WEBHOOK_URL"]),
        )

    if "HOSTMON_ALERT_EMAIL" in os.environ:
        config = replace(
            config, alerts=replace(config.alerts, email=os.environ["HOSTMON_ALERT_EMAIL"])
        )

    if "HOSTMON_POLL_INTERVAL" in os.environ:
        try:
            interval = int(os.environ["HOSTMON_POLL_INTERVAL"])
            config = replace(
                config,
                thresholds=replace(config.thresholds, poll_interval_seconds=interval),
            )
        except ValueError:
            pass

    return config


def save_config(config: Config, path: Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration to save
        path: Path to save to
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        f.write("# Host Monitor Configuration\n")
        f.write("# Values not listed here fall back to built-in defaults\n\n")
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
