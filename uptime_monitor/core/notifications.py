"""Alert dispatch for status transitions via Telegram, webhook and email."""

import asyncio
from email.mime.text import MIMEText
from typing import List, NamedTuple, Optional

import aiohttp
import aiosmtplib

from uptime_monitor.config import (
    NotificationsConfig,
    TelegramConfig,
    WebhookConfig,
    EmailConfig
)
from uptime_monitor.core.errors import NotificationError
from uptime_monitor.core.metrics import MetricsCollector
from uptime_monitor.models.check import Check, CheckStatus
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

MESSAGE_TEMPLATE = "🚨 Uptime Alert\n{check_name}\n{previous_status} → {new_status}\n{url}"


def format_alert(check: Check, previous_status: CheckStatus, new_status: CheckStatus) -> str:
    """Human-readable transition message."""
    return MESSAGE_TEMPLATE.format(
        check_name=check.name,
        previous_status=previous_status.value,
        new_status=new_status.value,
        url=check.url
    )


class TelegramChannel:
    """Sends alerts through the Telegram Bot API."""

    name = "telegram"

    def __init__(self, config: TelegramConfig):
        self.config = config

    async def send(
        self,
        check: Check,
        message: str,
        previous_status: CheckStatus,
        new_status: CheckStatus
    ) -> None:
        url = f"{self.config.api_base}/bot{self.config.bot_token}/sendMessage"
        payload = {"chat_id": self.config.chat_id, "text": message}
        if self.config.parse_mode:
            payload["parse_mode"] = self.config.parse_mode

        try:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json=payload) as response:
                    if response.status != 200:
                        body = await response.text()
                        raise NotificationError(
                            self.name,
                            f"Telegram API returned {response.status}: {body[:200]}"
                        )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NotificationError(self.name, str(e) or e.__class__.__name__) from e


class WebhookChannel:
    """Posts a JSON alert payload to a configured URL."""

    name = "webhook"

    def __init__(self, config: WebhookConfig):
        self.config = config

    async def send(
        self,
        check: Check,
        message: str,
        previous_status: CheckStatus,
        new_status: CheckStatus
    ) -> None:
        payload = {
            "check_id": check.id,
            "check_name": check.name,
            "url": check.url,
            "previous_status": previous_status.value,
            "new_status": new_status.value,
            "text": message,
        }

        try:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self.config.url,
                    json=payload,
                    headers=self.config.headers
                ) as response:
                    if response.status >= 400:
                        raise NotificationError(
                            self.name,
                            f"Webhook returned {response.status}"
                        )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NotificationError(self.name, str(e) or e.__class__.__name__) from e


class EmailChannel:
    """
    Sends alerts over SMTP.

    A check's alert_email, when set, replaces the configured recipients.
    """

    name = "email"

    def __init__(self, config: EmailConfig):
        self.config = config

    def recipients_for(self, check: Check) -> List[str]:
        if check.alert_email:
            return [check.alert_email]
        return list(self.config.to_addrs)

    async def send(
        self,
        check: Check,
        message: str,
        previous_status: CheckStatus,
        new_status: CheckStatus
    ) -> None:
        recipients = self.recipients_for(check)
        if not recipients:
            raise NotificationError(self.name, "No recipients configured")

        msg = MIMEText(message, "plain", "utf-8")
        msg["From"] = self.config.from_addr
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = self.config.subject_template.format(
            check_name=check.name,
            previous_status=previous_status.value,
            new_status=new_status.value
        )

        try:
            await aiosmtplib.send(
                msg,
                hostname=self.config.smtp_host,
                port=self.config.smtp_port,
                username=self.config.smtp_user or None,
                password=self.config.smtp_password or None,
                use_tls=self.config.smtp_use_tls,
                start_tls=self.config.smtp_starttls and not self.config.smtp_use_tls
            )
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as e:
            raise NotificationError(self.name, str(e) or e.__class__.__name__) from e


class DispatchOutcome(NamedTuple):
    """Channels that delivered or failed for one alert."""
    sent: List[str]
    failed: List[str]

    @property
    def attempted(self) -> bool:
        return bool(self.sent or self.failed)


class AlertDispatcher:
    """
    Sends transition alerts through every configured channel.

    Having no channel configured is not an error: notify() is then a no-op.
    Delivery failures are logged per channel and never propagate.
    """

    def __init__(
        self,
        config: NotificationsConfig,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize alert dispatcher.

        Args:
            config: Notifications configuration
            metrics: Optional metrics collector
        """
        self.config = config
        self.metrics = metrics
        self.channels = self._build_channels(config)

        logger.info(
            "Alert dispatcher initialized",
            extra={
                "enabled": config.enabled,
                "channels": [channel.name for channel in self.channels]
            }
        )

    @staticmethod
    def _build_channels(config: NotificationsConfig) -> list:
        if not config.enabled:
            return []

        channels = []
        if config.telegram.configured:
            channels.append(TelegramChannel(config.telegram))
        if config.webhook.configured:
            channels.append(WebhookChannel(config.webhook))
        if config.email.configured:
            channels.append(EmailChannel(config.email))
        return channels

    async def notify(
        self,
        check: Check,
        previous_status: CheckStatus,
        new_status: CheckStatus
    ) -> DispatchOutcome:
        """
        Send a transition alert for a check.

        Args:
            check: Check whose status changed
            previous_status: Status before the probe
            new_status: Status after the probe

        Returns:
            DispatchOutcome: Names of channels that delivered and that failed
        """
        outcome = DispatchOutcome(sent=[], failed=[])
        if not self.channels:
            logger.debug(
                "No notification channel configured, skipping alert",
                extra={"check_id": check.id}
            )
            return outcome

        message = format_alert(check, previous_status, new_status)

        for channel in self.channels:
            try:
                await channel.send(check, message, previous_status, new_status)
            except NotificationError as e:
                outcome.failed.append(channel.name)
                logger.error(
                    "Failed to send alert",
                    extra={
                        "check_id": check.id,
                        "check_name": check.name,
                        "channel": channel.name,
                        "error": str(e)
                    }
                )
                if self.metrics:
                    self.metrics.record_notification(channel.name, "failed")
                continue

            outcome.sent.append(channel.name)
            logger.info(
                "Alert sent",
                extra={
                    "check_id": check.id,
                    "channel": channel.name,
                    "new_status": new_status.value
                }
            )
            if self.metrics:
                self.metrics.record_notification(channel.name, "sent")

        return outcome
