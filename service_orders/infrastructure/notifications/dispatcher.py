import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Optional

from ...domain import (
    Audience,
    MessageSender,
    NotificationEvent,
    NotificationException,
    NotificationPublisher,
    TechnicianContact,
    TechnicianDirectory
)
from .messages import render_message

logger = logging.getLogger(__name__)


class NotificationDispatcher(NotificationPublisher):
    """Fire-and-forget delivery of committed events.

    Destinations are resolved per audience and each send runs on the
    executor. A failed send is logged as NOTIFICATION_ERROR; the operation
    that produced the event has already succeeded and is never rolled back.
    """

    def __init__(
        self,
        sender: MessageSender,
        boss_phone: str,
        support_phone: str,
        technicians: TechnicianDirectory,
        executor: Optional[Executor] = None,
        workers: int = 4
    ):
        self._sender = sender
        self._boss_phone = boss_phone
        self._support_phone = support_phone
        self._technicians = technicians
        self._executor = executor or ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="notifications"
        )

    def publish(self, events: list[NotificationEvent]) -> None:
        for event in events:
            try:
                target = self._resolve(event)
            except Exception:
                logger.exception("No se pudo preparar la notificación %s", event.to_simple_dict())
                continue
            if target is None:
                continue
            destination, message = target
            future = self._executor.submit(self._sender.send, destination, message)
            future.add_done_callback(lambda f, e=event: self._on_done(f, e))

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _resolve(self, event: NotificationEvent) -> Optional[tuple[str, str]]:
        technician: Optional[TechnicianContact] = None
        technician_id = event.metadata.get("technician_id")
        if technician_id:
            technician = self._technicians.find(technician_id)

        if event.audience == Audience.CLIENT:
            destination = event.metadata.get("client", {}).get("whatsapp")
        elif event.audience == Audience.INTERNAL:
            destination = self._boss_phone
        else:
            destination = technician.phone if technician is not None else None

        if not destination:
            logger.warning(
                "Notificación %s de la orden #%s sin destino para %s",
                event.event_type.value, event.order_number, event.audience.value
            )
            return None
        return destination, render_message(event, self._support_phone, technician)

    @staticmethod
    def _on_done(future: Future, event: NotificationEvent) -> None:
        error = future.exception()
        if error is None:
            logger.debug("Notificación enviada: %s", event.to_simple_dict())
            return
        failure = NotificationException.build(
            event.event_type.value,
            event.order_id,
            f"No se pudo notificar a {event.audience.value}",
            details=str(error)
        )
        logger.error(
            "%s [%s] %s: %s (%s)",
            failure.error.operation,
            failure.error.order_id,
            failure.error.code.value,
            failure.error.message,
            failure.details
        )
