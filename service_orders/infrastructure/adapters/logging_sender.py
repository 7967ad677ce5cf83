import logging

from ...domain import MessageSender

logger = logging.getLogger(__name__)


class LoggingMessageSender(MessageSender):
    """Sender used when no messaging gateway is configured."""

    def send(self, destination: str, message: str) -> None:
        logger.info("Mensaje para %s:\n%s", destination, message)
