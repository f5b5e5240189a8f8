"""
Signal Sink
===========

Persists triggered signals to the signal log, then notifies the operator.
Each signal is handled independently: a failed write does not block the
notification and a failed notification does not undo the write.
"""

import asyncio
import logging
from typing import List, Optional, Protocol

from ..db.signal_db import SignalDB
from ..errors import NotificationError, PersistenceError
from ..models import Signal

logger = logging.getLogger(__name__)

ACTION_NOTIFIED = "notified"
ACTION_LOGGED = "logged"
ACTION_DRY_RUN = "dry_run"


class Notifier(Protocol):
    def send_signal_alert(self, signal: Signal): ...


class SignalSink:
    """Persist-then-notify handler for a cycle's signals."""

    def __init__(
        self,
        signal_db: SignalDB,
        notifier: Optional[Notifier] = None,
        dry_run: bool = False,
    ):
        self.signal_db = signal_db
        self.notifier = notifier
        self.dry_run = dry_run

    @property
    def action_taken(self) -> str:
        if self.dry_run:
            return ACTION_DRY_RUN
        return ACTION_NOTIFIED if self.notifier is not None else ACTION_LOGGED

    async def record(self, signals: List[Signal]):
        """
        Persist and notify a batch of signals.

        Never raises for per-signal failures; they are logged.
        """
        if not signals:
            return

        if self.notifier is None and not self.dry_run:
            logger.warning(
                f"No notifier configured: {len(signals)} signal(s) logged without notification"
            )

        action = self.action_taken
        for signal in signals:
            item = signal.item
            try:
                self.signal_db.log_signal(signal, action)
            except PersistenceError as e:
                logger.error(f"Failed to persist signal for post {item.id}: {e}")

            if self.dry_run:
                logger.info(
                    f"[DRY RUN] Signal {signal.source_tag.value} {signal.matched_value!r}: "
                    f"post {item.id} by @{item.author_handle} score {signal.score:.2f}"
                )
                continue

            if self.notifier is None:
                continue

            try:
                await asyncio.to_thread(self.notifier.send_signal_alert, signal)
            except NotificationError as e:
                logger.error(f"Notification failed for post {item.id}: {e}")
            except Exception as e:
                logger.exception(f"Unexpected notifier error for post {item.id}: {e}")
