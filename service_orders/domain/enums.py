from enum import Enum


class OrderStatus(str, Enum):
    PREORDER = "PREORDER"
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    APROBADO = "APROBADO"
    NO_APROBADO = "NO_APROBADO"
    PENDIENTE_AVISAR = "PENDIENTE_AVISAR"
    FACTURADO = "FACTURADO"
    REPARANDO = "REPARANDO"
    COMPLETED = "COMPLETED"
    ENTREGA_GENERADA = "ENTREGA_GENERADA"
    DELIVERED = "DELIVERED"
    GARANTIA_APLICADA = "GARANTIA_APLICADA"
    GARANTIA_RESUELTA = "GARANTIA_RESUELTA"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    TRANSFER = "TRANSFER"
    ZELLE = "ZELLE"
    CARD = "CARD"
    PAYPAL = "PAYPAL"
    OTHER = "OTHER"


class WarrantyPriority(str, Enum):
    BAJA = "BAJA"
    MEDIA = "MEDIA"
    ALTA = "ALTA"


class CancellationType(str, Enum):
    PERMANENT = "permanent"
    RESCHEDULE = "reschedule"
    REVERT = "revert"


class NotificationType(str, Enum):
    ORDER_CREATED = "ORDER_CREATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    PAYMENT_RECORDED = "PAYMENT_RECORDED"
    TECHNICIAN_ASSIGNED = "TECHNICIAN_ASSIGNED"
    TECHNICIAN_REMOVED = "TECHNICIAN_REMOVED"


class Audience(str, Enum):
    CLIENT = "CLIENT"
    INTERNAL = "INTERNAL"
    TECHNICIAN = "TECHNICIAN"


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    STATE_TRANSITION_ERROR = "STATE_TRANSITION_ERROR"
    ELIGIBILITY_ERROR = "ELIGIBILITY_ERROR"
    NOT_FOUND = "NOT_FOUND"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    NOTIFICATION_ERROR = "NOTIFICATION_ERROR"
