from .in_memory_repository import InMemoryServiceOrderRepository
from .in_memory_technician_directory import InMemoryTechnicianDirectory
from .logging_sender import LoggingMessageSender

__all__ = [
    "InMemoryServiceOrderRepository",
    "InMemoryTechnicianDirectory",
    "LoggingMessageSender"
]
