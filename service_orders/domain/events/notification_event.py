from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..enums import Audience, NotificationType


@dataclass(frozen=True)
class NotificationEvent:
    order_id: str
    order_number: str
    event_type: NotificationType
    audience: Audience
    timestamp: datetime
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "order_number": self.order_number,
            "type": self.event_type.value,
            "audience": self.audience.value,
            "ts": self.timestamp.isoformat(),
            "metadata": self.metadata
        }

    def to_simple_dict(self) -> dict[str, str]:
        return {
            "order_id": self.order_id,
            "type": self.event_type.value,
            "audience": self.audience.value
        }
