from .notification_event import NotificationEvent

__all__ = ["NotificationEvent"]
