"""
User-visible notifications.

Operations report their outcome here instead of raising. The UI layer reads
the active toasts or subscribes to new ones; nothing is acknowledged back to
the caller.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from core.config import get_config

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class NotificationToast:
    """A transient message shown to the user."""
    text: str
    delay_seconds: float = 7.0
    error: bool = False
    created_at: float = field(default_factory=time.monotonic)

    def is_expired(self, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        return now - self.created_at >= self.delay_seconds


class Notifier:
    """
    Collects info and error toasts.

    Usage:
        notifier = Notifier()
        notifier.subscribe(lambda toast: print(toast.text))

        notifier.info("Video deleted successfully.")
        notifier.error("Failed to delete video.")
    """

    def __init__(
        self,
        info_delay_seconds: Optional[float] = None,
        error_delay_seconds: Optional[float] = None,
    ):
        settings = get_config().notifications
        self.info_delay_seconds = (
            settings.info_delay_seconds if info_delay_seconds is None else info_delay_seconds
        )
        self.error_delay_seconds = (
            settings.error_delay_seconds if error_delay_seconds is None else error_delay_seconds
        )
        self.toasts: list[NotificationToast] = []
        self._listeners: list[Callable[[NotificationToast], None]] = []

    def subscribe(self, listener: Callable[[NotificationToast], None]):
        """Register a callable invoked for every new toast."""
        self._listeners.append(listener)

    def info(self, text: str):
        logger.info(text)
        self._push(NotificationToast(text, self.info_delay_seconds))

    def error(self, text: str):
        logger.error(text)
        self._push(NotificationToast(text, self.error_delay_seconds, error=True))

    def remove(self, toast: NotificationToast):
        """Dismiss a toast before its delay runs out."""
        self.toasts = [t for t in self.toasts if t is not toast]

    def active(self, now: Optional[float] = None) -> list[NotificationToast]:
        """Toasts still within their display delay; expired ones are dropped."""
        self._prune(now)
        return list(self.toasts)

    def _prune(self, now: Optional[float] = None):
        self.toasts = [t for t in self.toasts if not t.is_expired(now)]

    def _push(self, toast: NotificationToast):
        self._prune()
        self.toasts.append(toast)
        for listener in self._listeners:
            try:
                listener(toast)
            except Exception as e:
                logger.warning(f"Notification listener failed: {e}")
