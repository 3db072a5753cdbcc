"""
Notification Service

Info and error toasts surfaced to the user by the video job client.
"""

from .notifier import Notifier, NotificationToast

__all__ = ["Notifier", "NotificationToast"]
