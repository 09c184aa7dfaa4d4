"""
Alerting framework for the host monitor.

Provides alert handlers for a chat webhook and email, and a Notifier that
dispatches to them. Delivery is best-effort: a failing channel is logged
and never interrupts the check that raised the alert.
"""

import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage
from enum import Enum
from typing import Optional

import requests

from hostmon.core.config import AlertChannelConfig
from hostmon.core.exceptions import NotificationError

logger = logging.getLogger(__name__)


class AlertLevel(Enum):
    """Alert severity levels."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class Alert:
    """An alert to be sent to handlers."""

    level: AlertLevel
    message: str
    subject: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self) -> str:
        """Format alert as a single log-style line."""
        ts = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        level = self.level.value.upper()
        if self.subject:
            return f"[{ts}] [{level}] {self.subject}: {self.message}"
        return f"[{ts}] [{level}] {self.message}"


class AlertHandler(ABC):
    """Abstract base class for alert handlers."""

    @abstractmethod
    def send(self, alert: Alert) -> None:
        """
        Send an alert.

        Args:
            alert: Alert to send

        Raises:
            NotificationError: If the alert could not be delivered
        """
        pass

    def close(self) -> None:
        """Clean up handler resources."""
        pass


class WebhookAlertHandler(AlertHandler):
    """Alert handler that posts to a Slack-compatible incoming webhook."""

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook handler.

        Args:
            webhook_url: Incoming webhook URL
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    def send(self, alert: Alert) -> None:
        """Post the alert text as {"text": ...}."""
        payload = {"text": f"Alert: {alert.message}"}
        try:
            response = requests.post(self.webhook_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NotificationError(f"Webhook post failed: {e}") from e


class EmailAlertHandler(AlertHandler):
    """Alert handler that sends mail through an SMTP relay."""

    def __init__(
        self,
        recipients: list[str],
        smtp_host: str = "localhost",
        smtp_port: int = 25,
        sender: str = "hostmon@localhost",
        starttls: bool = False,
        username: str = "",
        password: str = "",
        timeout: float = 10.0,
    ):
        """
        Initialize email handler.

        Args:
            recipients: Destination addresses
            smtp_host: SMTP relay host
            smtp_port: SMTP relay port
            sender: From address
            starttls: Upgrade the connection with STARTTLS
            username: Login user (no login if empty)
            password: Login password
            timeout: Socket timeout in seconds
        """
        self.recipients = recipients
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.sender = sender
        self.starttls = starttls
        self.username = username
        self.password = password
        self.timeout = timeout

    def _build_message(self, alert: Alert) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = alert.subject or f"Host alert ({alert.level.value})"
        msg["From"] = self.sender
        msg["To"] = ", ".join(self.recipients)
        msg.set_content(alert.message)
        return msg

    def send(self, alert: Alert) -> None:
        """Send the alert as a plain-text email."""
        msg = self._build_message(alert)
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                if self.starttls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Email to {self.recipients} failed: {e}") from e


class Notifier:
    """
    Dispatches alerts to the chat and mail channels.

    Both channels are independent. A missing channel only logs the alert.
    """

    def __init__(
        self,
        chat: Optional[AlertHandler] = None,
        mail: Optional[AlertHandler] = None,
    ):
        """
        Initialize notifier.

        Args:
            chat: Handler for chat alerts (e.g. webhook)
            mail: Handler for mail alerts (e.g. SMTP)
        """
        self.chat = chat
        self.mail = mail

    @classmethod
    def from_config(cls, config: AlertChannelConfig) -> "Notifier":
        """Create a notifier with the channels enabled in config."""
        chat = None
        if config.webhook_url:
            chat = WebhookAlertHandler(config.webhook_url, timeout=config.timeout)

        mail = None
        if config.email:
            recipients = [a.strip() for a in config.email.split(",") if a.strip()]
            mail = EmailAlertHandler(
                recipients=recipients,
                smtp_host=config.smtp_host,
                smtp_port=config.smtp_port,
                sender=config.sender,
                starttls=config.smtp_starttls,
                username=config.smtp_username,
                password=config.smtp_password,
                timeout=config.timeout,
            )
        return cls(chat=chat, mail=mail)

    def notify_chat(self, message: str, level: AlertLevel = AlertLevel.WARNING) -> bool:
        """
        Send a chat alert.

        Returns:
            True if the alert was delivered
        """
        alert = Alert(level=level, message=message)
        return self._dispatch("chat", self.chat, alert)

    def notify_mail(
        self, subject: str, body: str, level: AlertLevel = AlertLevel.CRITICAL
    ) -> bool:
        """
        Send a mail alert.

        Returns:
            True if the alert was delivered
        """
        alert = Alert(level=level, message=body, subject=subject)
        return self._dispatch("mail", self.mail, alert)

    def _dispatch(
        self, channel: str, handler: Optional[AlertHandler], alert: Alert
    ) -> bool:
        if handler is None:
            logger.info(f"No {channel} channel configured, alert not sent: {alert.format()}")
            return False
        try:
            handler.send(alert)
            return True
        except NotificationError as e:
            logger.error(f"Failed to send {channel} alert: {e}")
        except Exception as e:
            logger.error(f"Handler {handler.__class__.__name__} failed: {e}")
        return False

    def close(self) -> None:
        """Close all handlers."""
        for handler in (self.chat, self.mail):
            if handler is None:
                continue
            try:
                handler.close()
            except Exception as e:
                logger.error(f"Error closing handler: {e}")
