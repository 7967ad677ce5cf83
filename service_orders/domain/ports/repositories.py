from abc import ABC, abstractmethod
from typing import Optional

from ..entities import ServiceOrder


class ServiceOrderRepository(ABC):
    """Loads and stores whole order aggregates.

    `save` must be atomic across the order and its child rows, and must
    reject an aggregate whose `version` is older than the stored one.
    """

    @abstractmethod
    def save(self, order: ServiceOrder) -> None:
        pass

    @abstractmethod
    def find_by_id(self, order_id: str) -> Optional[ServiceOrder]:
        pass

    @abstractmethod
    def find_all(self) -> list[ServiceOrder]:
        pass

    @abstractmethod
    def exists(self, order_id: str) -> bool:
        pass

    @abstractmethod
    def delete(self, order_id: str) -> None:
        pass

    @abstractmethod
    def next_sequence(self, prefix: str) -> int:
        pass
