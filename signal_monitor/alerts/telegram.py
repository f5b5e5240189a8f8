"""
Telegram Alerts
===============

Telegram notification channel for the signal monitor.

Alert types:
- Signal alerts: Sent for every post that crossed the bullishness threshold
- Service status: Monitor started/stopped/error notices
"""

import html
import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

import requests

from ..errors import NotificationError
from ..models import Signal, SignalSource

logger = logging.getLogger(__name__)

# Rate limiting constants
MIN_MESSAGE_INTERVAL_SECONDS = 1  # 1 second between any messages (Telegram limit: 30/sec)
MAX_ALERTS_PER_MINUTE = 20  # Global rate limit

# Post text shown in an alert is cut to this many characters
ALERT_TEXT_PREVIEW = 200


@dataclass
class AlertConfig:
    """Configuration for alert sending."""
    bot_token: str
    chat_id: str
    dry_run: bool = False
    max_message_length: int = 4000
    min_message_interval: float = MIN_MESSAGE_INTERVAL_SECONDS
    timezone: str = "UTC"
    request_timeout: float = 10.0


class TelegramAlerts:
    """
    Telegram alert sender for bullish signals.

    Sending is synchronous (requests); async callers run it in a worker
    thread. Failures raise NotificationError without exposing the bot token.
    """

    def __init__(self, config: AlertConfig):
        self.config = config
        self._validate()
        self._tz = ZoneInfo(config.timezone)

        # Rate limiting state
        self._last_message_time: float = 0
        self._alerts_this_minute: List[float] = []

    @classmethod
    def from_env(cls, dry_run: bool = False) -> Optional["TelegramAlerts"]:
        """
        Create TelegramAlerts from environment variables.

        Returns:
            TelegramAlerts instance if configured (or dry_run), None otherwise
        """
        bot_token = os.environ.get("TELEGRAM_BOT_TOKEN", "")
        chat_id = os.environ.get("TELEGRAM_CHAT_ID", "")

        if not dry_run and (not bot_token or not chat_id):
            logger.warning(
                "Telegram not configured (set TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID)"
            )
            return None

        return cls(AlertConfig(bot_token=bot_token, chat_id=chat_id, dry_run=dry_run))

    def _validate(self):
        if not self.config.dry_run:
            if not self.config.bot_token:
                raise ValueError("TELEGRAM_BOT_TOKEN is required (or use --dry-run)")
            if not self.config.chat_id:
                raise ValueError("TELEGRAM_CHAT_ID is required (or use --dry-run)")

    def _check_rate_limit(self) -> bool:
        """True if we can send, False if the per-minute budget is spent."""
        now = time.time()
        self._alerts_this_minute = [t for t in self._alerts_this_minute if now - t < 60]

        if len(self._alerts_this_minute) >= MAX_ALERTS_PER_MINUTE:
            logger.warning(f"Rate limited: {len(self._alerts_this_minute)} alerts in last minute")
            return False
        return True

    def _enforce_message_interval(self):
        elapsed = time.time() - self._last_message_time
        if elapsed < self.config.min_message_interval:
            time.sleep(self.config.min_message_interval - elapsed)

    def _truncate_message(self, text: str) -> str:
        """Truncate message to Telegram's character limit."""
        if len(text) > self.config.max_message_length:
            return text[:self.config.max_message_length - 20] + "\n... (truncated)"
        return text

    def _send_message(self, text: str, skip_rate_limit: bool = False) -> Optional[int]:
        """
        Send a message via Telegram Bot API.

        Args:
            text: Message text (HTML formatted)
            skip_rate_limit: If True, skip rate limit check (for status messages)

        Returns:
            message_id reported by Telegram

        Raises:
            NotificationError: Rate limited or delivery failed
        """
        text = self._truncate_message(text)

        if self.config.dry_run:
            logger.info(f"[DRY RUN] Would send Telegram message:\n{text}")
            return None

        if not skip_rate_limit and not self._check_rate_limit():
            raise NotificationError("Message dropped due to rate limiting")

        self._enforce_message_interval()

        url = f"https://api.telegram.org/bot{self.config.bot_token}/sendMessage"
        payload = {
            "chat_id": self.config.chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }

        # Exception details may contain the URL (and so the token): report
        # only the failure class
        try:
            response = requests.post(url, json=payload, timeout=self.config.request_timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout:
            raise NotificationError("Telegram request timed out") from None
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else "unknown"
            raise NotificationError(f"Telegram HTTP error: {status_code}") from None
        except requests.exceptions.ConnectionError:
            raise NotificationError("Telegram connection error") from None
        except requests.exceptions.RequestException:
            raise NotificationError("Telegram request failed") from None

        now = time.time()
        self._last_message_time = now
        self._alerts_this_minute.append(now)

        try:
            message_id = response.json().get("result", {}).get("message_id")
        except ValueError:
            message_id = None

        logger.info(f"Telegram alert sent successfully (message_id: {message_id})")
        return message_id

    # -------------------------------------------------------------------------
    # Message formatting
    # -------------------------------------------------------------------------

    @staticmethod
    def format_signal(signal: Signal) -> str:
        """Build the HTML alert body for a signal."""
        item = signal.item
        if signal.source_tag == SignalSource.INFLUENCER:
            source_line = f"Influencer @{html.escape(signal.matched_value)}"
        else:
            source_line = f"Keyword \"{html.escape(signal.matched_value)}\""

        text = item.text
        if len(text) > ALERT_TEXT_PREVIEW:
            text = text[:ALERT_TEXT_PREVIEW] + "..."

        lines = [
            "🚨 <b>Bullish Signal Detected!</b>",
            "",
            f"📊 Source: {source_line}",
            f"📈 Sentiment: <b>{signal.score * 100:.0f}%</b>",
            "",
            f"🐦 Post by @{html.escape(item.author_handle)}:",
            f"<i>\"{html.escape(text)}\"</i>",
        ]
        if signal.rationale:
            lines.append("")
            lines.append(f"💡 {html.escape(signal.rationale)}")
        if item.author_handle and item.id:
            lines.append("")
            lines.append(f"<a href=\"{html.escape(item.url)}\">View post</a>")

        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def send_signal_alert(self, signal: Signal) -> Optional[int]:
        """
        Send an alert for a triggered signal.

        Raises:
            NotificationError: Delivery failed
        """
        return self._send_message(self.format_signal(signal))

    def send_service_status(
        self,
        status: str,
        details: str = "",
        timestamp: datetime = None
    ) -> bool:
        """
        Send service status notification.

        These are operational messages and skip rate limiting.

        Args:
            status: Status type ("started", "stopped", "error", "disabled")
            details: Additional details
            timestamp: Timestamp (default: now)

        Returns:
            True if sent successfully
        """
        if timestamp is None:
            timestamp = datetime.now(timezone.utc)

        status_text = {
            "started": "Signal monitor started",
            "stopped": "Signal monitor stopped",
            "error": "Signal monitor error",
            "disabled": "Signal monitor disabled",
        }.get(status, f"Status: {status}")

        time_str = timestamp.astimezone(self._tz).strftime('%H:%M:%S %Z')
        lines = [f"<b>{status_text} at {time_str}</b>"]
        if details:
            lines.append("")
            lines.append(html.escape(details))

        try:
            self._send_message("\n".join(lines), skip_rate_limit=True)
        except NotificationError as e:
            logger.error(f"Service status not delivered: {e}")
            return False
        return True


def send_test_alert() -> bool:
    """Send a test message to verify the Telegram configuration."""
    alerts = TelegramAlerts.from_env()
    if alerts is None:
        return False

    try:
        alerts._send_message(
            "<b>Signal monitor test alert</b>\n\nTelegram alerts are configured correctly.",
            skip_rate_limit=True,
        )
    except NotificationError as e:
        logger.error(f"Test alert failed: {e}")
        return False
    return True
