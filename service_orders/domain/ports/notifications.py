from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..events.notification_event import NotificationEvent


@dataclass(frozen=True)
class TechnicianContact:
    technician_id: str
    name: str
    phone: str

    def to_dict(self) -> dict:
        return {"technician_id": self.technician_id, "name": self.name, "phone": self.phone}


class MessageSender(ABC):
    @abstractmethod
    def send(self, destination: str, message: str) -> None:
        pass


class TechnicianDirectory(ABC):
    @abstractmethod
    def find(self, technician_id: str) -> Optional[TechnicianContact]:
        pass


class NotificationPublisher(ABC):
    """Hands committed notification events to delivery without waiting on it."""

    @abstractmethod
    def publish(self, events: list[NotificationEvent]) -> None:
        pass
