import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header

from ...application import OrderLocks, ServiceOrderService
from ...application.dtos import (
    ApplyWarrantyDamageRequest,
    AssignTechnicianRequest,
    CancelOrRescheduleRequest,
    ChangeStatusRequest,
    CreateDeliveryNoteRequest,
    CreateOrderRequest,
    DeactivateTechnicianRequest,
    RecordPaymentRequest,
    RegisterTechnicianRequest,
    ResolveWarrantyRequest,
    Result,
    SetWarrantyPeriodRequest,
    UpdateOrderDetailsRequest
)
from ...config import Settings, get_settings
from ...domain import OrderStatus, TechnicianContact
from ..adapters import (
    InMemoryServiceOrderRepository,
    InMemoryTechnicianDirectory,
    LoggingMessageSender
)
from ..notifications import NotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["service-orders"])


def build_technician_directory(settings: Settings) -> InMemoryTechnicianDirectory:
    return InMemoryTechnicianDirectory([
        TechnicianContact(technician_id=technician_id, name=technician.name, phone=technician.phone)
        for technician_id, technician in settings.technicians.items()
    ])


_settings = get_settings()
_repository = InMemoryServiceOrderRepository()
_technicians = build_technician_directory(_settings)
_locks = OrderLocks()
_dispatcher = NotificationDispatcher(
    sender=LoggingMessageSender(),
    boss_phone=_settings.boss_phone,
    support_phone=_settings.support_phone,
    technicians=_technicians,
    workers=_settings.notification_workers
)


def get_repository() -> InMemoryServiceOrderRepository:
    return _repository


def get_technician_directory() -> InMemoryTechnicianDirectory:
    return _technicians


def get_dispatcher() -> NotificationDispatcher:
    return _dispatcher


def get_service(
    repository: InMemoryServiceOrderRepository = Depends(get_repository),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)
) -> ServiceOrderService:
    return ServiceOrderService(
        repository,
        publisher=dispatcher,
        locks=_locks,
        default_order_prefix=_settings.default_order_prefix
    )


def get_actor(x_user_id: str = Header(alias="X-User-Id")) -> str:
    return x_user_id


@router.post("/orders", response_model=Result)
def create_order(
    request: CreateOrderRequest,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.create_order(request, actor_id)


@router.get("/orders", response_model=Result)
def list_orders(
    status: Optional[OrderStatus] = None,
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.list_orders(status)


@router.get("/orders/warranties", response_model=Result)
def list_warranty_orders(service: ServiceOrderService = Depends(get_service)) -> Result:
    return service.list_warranty_orders()


@router.get("/orders/{order_id}", response_model=Result)
def get_order(order_id: str, service: ServiceOrderService = Depends(get_service)) -> Result:
    return service.get_order(order_id)


@router.patch("/orders/{order_id}", response_model=Result)
def update_order_details(
    order_id: str,
    request: UpdateOrderDetailsRequest,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.update_order_details(order_id, request, actor_id)


@router.delete("/orders/{order_id}", response_model=Result)
def delete_order(
    order_id: str,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.delete_order(order_id, actor_id)


@router.get("/orders/{order_id}/history", response_model=Result)
def get_status_history(order_id: str, service: ServiceOrderService = Depends(get_service)) -> Result:
    return service.get_status_history(order_id)


@router.post("/orders/{order_id}/status", response_model=Result)
def change_status(
    order_id: str,
    request: ChangeStatusRequest,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.change_status(order_id, request, actor_id)


@router.post("/orders/{order_id}/payments", response_model=Result)
def record_payment(
    order_id: str,
    request: RecordPaymentRequest,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.record_payment(order_id, request, actor_id)


@router.get("/orders/{order_id}/technicians", response_model=Result)
def list_active_assignments(order_id: str, service: ServiceOrderService = Depends(get_service)) -> Result:
    return service.list_active_assignments(order_id)


@router.post("/orders/{order_id}/technicians", response_model=Result)
def assign_technician(
    order_id: str,
    request: AssignTechnicianRequest,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.assign_technician(order_id, request, actor_id)


@router.post("/orders/{order_id}/technicians/{technician_id}/deactivate", response_model=Result)
def deactivate_technician_assignment(
    order_id: str,
    technician_id: str,
    request: DeactivateTechnicianRequest,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.deactivate_technician_assignment(order_id, technician_id, request, actor_id)


@router.post("/orders/{order_id}/warranty/period", response_model=Result)
def set_warranty_period(
    order_id: str,
    request: SetWarrantyPeriodRequest,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.set_warranty_period(order_id, request, actor_id)


@router.post("/orders/{order_id}/warranty/damage", response_model=Result)
def apply_warranty_damage(
    order_id: str,
    request: ApplyWarrantyDamageRequest,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.apply_warranty_damage(order_id, request, actor_id)


@router.post("/orders/{order_id}/warranty/resolve", response_model=Result)
def resolve_warranty(
    order_id: str,
    request: ResolveWarrantyRequest,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.resolve_warranty(order_id, request, actor_id)


@router.post("/orders/{order_id}/cancellation", response_model=Result)
def cancel_or_reschedule(
    order_id: str,
    request: CancelOrRescheduleRequest,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.cancel_or_reschedule(order_id, request, actor_id)


@router.post("/orders/{order_id}/delivery-notes", response_model=Result)
def create_delivery_note(
    order_id: str,
    request: CreateDeliveryNoteRequest,
    actor_id: str = Depends(get_actor),
    service: ServiceOrderService = Depends(get_service)
) -> Result:
    return service.create_delivery_note(order_id, request, actor_id)


@router.put("/technicians/{technician_id}", response_model=Result)
def register_technician(
    technician_id: str,
    request: RegisterTechnicianRequest,
    actor_id: str = Depends(get_actor),
    technicians: InMemoryTechnicianDirectory = Depends(get_technician_directory)
) -> Result:
    contact = TechnicianContact(technician_id=technician_id, name=request.name, phone=request.phone)
    technicians.register(contact)
    logger.info("Técnico %s registrado por %s", technician_id, actor_id)
    return Result.ok(contact.to_dict())


@router.post("/reset")
def reset_repository(
    repository: InMemoryServiceOrderRepository = Depends(get_repository)
) -> dict[str, str]:
    repository.clear()
    return {"status": "ok", "message": "Repository cleared"}
