from .dispatcher import NotificationDispatcher
from .messages import render_message, status_text

__all__ = ["NotificationDispatcher", "render_message", "status_text"]
