from typing import Optional

from ...domain import TechnicianContact, TechnicianDirectory


class InMemoryTechnicianDirectory(TechnicianDirectory):
    def __init__(self, technicians: Optional[list[TechnicianContact]] = None):
        self._technicians: dict[str, TechnicianContact] = {}
        for technician in technicians or []:
            self.register(technician)

    def register(self, technician: TechnicianContact) -> None:
        self._technicians[technician.technician_id] = technician

    def find(self, technician_id: str) -> Optional[TechnicianContact]:
        return self._technicians.get(technician_id)

    def clear(self) -> None:
        self._technicians.clear()
