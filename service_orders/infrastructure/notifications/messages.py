"""Spanish WhatsApp texts for notification events.

Rendering is pure: everything a message needs travels in the event
metadata, so templates can change without touching the lifecycle rules.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ...domain import Audience, NotificationEvent, NotificationType, OrderStatus, TechnicianContact

STATUS_TEXT = {
    OrderStatus.PREORDER: "Pre-orden",
    OrderStatus.PENDING: "Pendiente",
    OrderStatus.ASSIGNED: "Asignada",
    OrderStatus.IN_PROGRESS: "En Progreso",
    OrderStatus.APROBADO: "Aprobada",
    OrderStatus.NO_APROBADO: "No Aprobada",
    OrderStatus.PENDIENTE_AVISAR: "Pendiente Avisar",
    OrderStatus.FACTURADO: "Facturada",
    OrderStatus.REPARANDO: "Reparando",
    OrderStatus.COMPLETED: "Completada",
    OrderStatus.ENTREGA_GENERADA: "Entrega Generada",
    OrderStatus.DELIVERED: "Entregada",
    OrderStatus.GARANTIA_APLICADA: "Garantía Aplicada",
    OrderStatus.GARANTIA_RESUELTA: "Garantía Resuelta",
    OrderStatus.CANCELLED: "Cancelada",
}

STATUS_HEADLINE = {
    OrderStatus.COMPLETED: ("✅", "SERVICIO COMPLETADO"),
    OrderStatus.DELIVERED: ("🚚", "EQUIPO ENTREGADO"),
    OrderStatus.APROBADO: ("👍", "PRESUPUESTO APROBADO"),
    OrderStatus.NO_APROBADO: ("👎", "PRESUPUESTO RECHAZADO"),
    OrderStatus.IN_PROGRESS: ("🔧", "SERVICIO EN PROGRESO"),
    OrderStatus.REPARANDO: ("🔧", "EQUIPO EN REPARACIÓN"),
    OrderStatus.ASSIGNED: ("👨‍🔧", "TÉCNICO ASIGNADO"),
    OrderStatus.GARANTIA_APLICADA: ("🛡️", "GARANTÍA APLICADA"),
    OrderStatus.CANCELLED: ("❌", "ORDEN CANCELADA"),
}
DEFAULT_HEADLINE = ("🔄", "ACTUALIZACIÓN DE ORDEN")

PAYMENT_METHOD_TEXT = {
    "CASH": "Efectivo",
    "TRANSFER": "Transferencia bancaria",
    "ZELLE": "Zelle",
    "CARD": "Tarjeta",
    "PAYPAL": "PayPal",
    "OTHER": "Otro método",
}


def status_text(value: Optional[str]) -> str:
    if not value:
        return "-"
    try:
        return STATUS_TEXT[OrderStatus(value)]
    except ValueError:
        return value


def format_currency(value: Any) -> str:
    if value is None:
        return "A determinar"
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return str(value)
    return f"${amount:,.2f}"


def _boxed(emoji: str, title: str) -> str:
    return (
        "╔════════════════════════╗\n"
        f"║    {emoji} {title}    ║\n"
        "╚════════════════════════╝\n\n"
    )


def _client_name(event: NotificationEvent) -> str:
    return event.metadata.get("client", {}).get("name") or "No especificado"


def _client_phone(event: NotificationEvent) -> str:
    return event.metadata.get("client", {}).get("phone") or ""


def _headline(event: NotificationEvent) -> tuple[str, str]:
    meta = event.metadata
    if meta.get("rescheduled"):
        return "📅", "ORDEN REPROGRAMADA"
    if meta.get("requested_status") == OrderStatus.GARANTIA_RESUELTA.value:
        return "🛡️", "GARANTÍA RESUELTA"
    try:
        return STATUS_HEADLINE.get(OrderStatus(meta.get("new_status")), DEFAULT_HEADLINE)
    except ValueError:
        return DEFAULT_HEADLINE


def _status_details(event: NotificationEvent) -> str:
    meta = event.metadata
    text = ""
    if meta.get("cancellation_notes") and meta.get("new_status") == OrderStatus.CANCELLED.value:
        text += f"❌ *Motivo de Cancelación:* _{meta['cancellation_notes']}_\n"
    if meta.get("rescheduled") and meta.get("fecha_agendado"):
        text += f"📆 *Nueva Fecha Agendada:* {meta['fecha_agendado'][:10]}\n"
    if meta.get("presupuesto_amount"):
        text += f"💰 *Presupuesto:* {format_currency(meta['presupuesto_amount'])}\n"
    if meta.get("razon_garantia"):
        text += f"🛡️ *Razón de garantía:* _{meta['razon_garantia']}_\n"
    return text


def _order_created(event: NotificationEvent, support_phone: str) -> str:
    meta = event.metadata
    kind = "Pre-orden" if meta.get("is_pre_order") else "Orden de servicio"
    description = meta.get("description")
    body = (
        f"📋 *Tipo:* {kind}\n"
        f"🏷️ *Estado:* {status_text(meta.get('status'))}\n"
        + (f"📆 *Fecha Agendada:* {meta['fecha_agendado'][:10]}\n" if meta.get("fecha_agendado") else "")
        + f"\n📝 *DETALLES:*\n_{description or 'No se proporcionaron detalles'}_\n"
        + f"\n💰 *Monto:* {format_currency(meta.get('total_amount'))}"
    )
    if event.audience == Audience.CLIENT:
        return (
            _boxed("🔧", "NUEVA ORDEN DE SERVICIO")
            + f"🆔 *No. Orden:* #{event.order_number}\n"
            + f"👤 *Cliente:* {_client_name(event)}\n"
            + body
            + "\n\n✅ Su solicitud ha sido registrada exitosamente."
            + f"\n📞 Para consultas llame al {support_phone}"
        )
    return (
        "🚨 *NUEVA ORDEN CREADA* 🚨\n\n"
        f"🆔 *Orden:* #{event.order_number}\n"
        f"👤 *Cliente:* {_client_name(event)}\n"
        f"📱 *Contacto:* {_client_phone(event)}\n"
        + body
    )


def _status_changed(event: NotificationEvent, support_phone: str) -> str:
    meta = event.metadata
    emoji, title = _headline(event)
    old, new = status_text(meta.get("old_status")), status_text(meta.get("new_status"))
    if event.audience == Audience.CLIENT:
        return (
            _boxed(emoji, title)
            + f"🆔 *No. Orden:* #{event.order_number}\n"
            + f"👤 *Cliente:* {_client_name(event)}\n\n"
            + f"📊 *Estado Anterior:* {old}\n"
            + f"📊 *Nuevo Estado:* {new}\n"
            + _status_details(event)
            + f"\n📞 Para consultas llame al {support_phone}"
        )
    return (
        f"{emoji} *{title}* {emoji}\n\n"
        f"🆔 *Orden:* #{event.order_number}\n"
        f"👤 *Cliente:* {_client_name(event)}\n"
        f"📱 *Contacto:* {_client_phone(event)}\n"
        f"\n📊 *Cambio de estado:* {old} ➡️ {new}\n"
        + _status_details(event)
    )


def _payment_recorded(event: NotificationEvent, support_phone: str) -> str:
    meta = event.metadata
    paid = meta.get("payment_status") == "PAID"
    method = PAYMENT_METHOD_TEXT.get(meta.get("method"), meta.get("method"))
    body = (
        f"💳 *Método:* {method}\n"
        + (f"🔢 *Referencia:* {meta['reference']}\n" if meta.get("reference") else "")
        + (f"📝 *Notas:* {meta['notes']}\n" if meta.get("notes") else "")
        + f"\n📊 *Estado del pago:* {'Completado ✅' if paid else 'Parcial ⏳'}\n"
        + f"💵 *Total pagado:* {format_currency(meta.get('paid_amount'))}\n"
        + f"💰 *Monto total:* {format_currency(meta.get('total_amount'))}\n"
        + ("" if paid else f"💸 *Pendiente:* {format_currency(meta.get('remaining'))}\n")
    )
    if event.audience == Audience.CLIENT:
        return (
            _boxed("💰", "PAGO REGISTRADO")
            + f"🆔 *No. Orden:* #{event.order_number}\n"
            + f"👤 *Cliente:* {_client_name(event)}\n\n"
            + f"✅ *Pago recibido:* {format_currency(meta.get('amount'))}\n"
            + body
            + f"\n¡Gracias por su pago!\n\n📞 *Soporte:* {support_phone}"
        )
    return (
        "💰 *PAGO REGISTRADO* 💰\n\n"
        f"🆔 *Orden:* #{event.order_number}\n"
        f"👤 *Cliente:* {_client_name(event)}\n\n"
        f"✅ *Monto:* {format_currency(meta.get('amount'))}\n"
        + body
    )


def _technician_line(technician: Optional[TechnicianContact], technician_id: Optional[str]) -> str:
    if technician is not None:
        return f"{technician.name} - {technician.phone}"
    return technician_id or "-"


def _technician_assigned(
    event: NotificationEvent,
    support_phone: str,
    technician: Optional[TechnicianContact]
) -> str:
    meta = event.metadata
    notes = f"📝 *Notas:* _{meta['notes']}_\n" if meta.get("notes") else ""
    if event.audience == Audience.TECHNICIAN:
        greeting = f"👨‍🔧 *Hola {technician.name}*\n\n" if technician is not None else ""
        return (
            "🔔 *NUEVA ASIGNACIÓN* 🔔\n\n"
            + greeting
            + "Has sido asignado a la siguiente orden:\n\n"
            + f"🆔 *Orden:* #{event.order_number}\n"
            + f"👤 *Cliente:* {_client_name(event)}\n"
            + f"📱 *Contacto:* {_client_phone(event)}\n"
            + notes
            + "\nPor favor, contacta al cliente para coordinar la visita técnica."
        )
    line = _technician_line(technician, meta.get("technician_id"))
    if event.audience == Audience.CLIENT:
        return (
            _boxed("👨‍🔧", "TÉCNICO ASIGNADO")
            + f"🆔 *No. Orden:* #{event.order_number}\n"
            + f"👤 *Cliente:* {_client_name(event)}\n\n"
            + f"✅ *Técnico asignado:* {line}\n"
            + notes
            + "\nℹ️ El técnico se pondrá en contacto con usted próximamente para coordinar la visita técnica.\n\n"
            + f"📞 *Soporte:* {support_phone}"
        )
    return (
        "👨‍🔧 *TÉCNICO ASIGNADO* 👨‍🔧\n\n"
        f"🆔 *Orden:* #{event.order_number}\n"
        f"👤 *Cliente:* {_client_name(event)}\n"
        f"📱 *Contacto Cliente:* {_client_phone(event)}\n\n"
        f"✅ *Técnico asignado:* {line}\n"
        + notes
    )


def _technician_removed(
    event: NotificationEvent,
    support_phone: str,
    technician: Optional[TechnicianContact]
) -> str:
    meta = event.metadata
    active = meta.get("technicians") or []
    active_text = (
        "✅ *Técnicos activos:*\n" + "\n".join(f"👉 {t}" for t in active) + "\n"
        if active else "⚠️ La orden no tiene técnicos activos.\n"
    )
    if event.audience == Audience.TECHNICIAN:
        return (
            "ℹ️ *ASIGNACIÓN FINALIZADA*\n\n"
            f"Ya no estás asignado a la orden #{event.order_number}.\n"
            f"👤 *Cliente:* {_client_name(event)}"
        )
    removed = _technician_line(technician, meta.get("technician_id"))
    if event.audience == Audience.CLIENT:
        return (
            _boxed("🔄", "CAMBIO DE TÉCNICO")
            + f"🆔 *No. Orden:* #{event.order_number}\n"
            + f"👤 *Cliente:* {_client_name(event)}\n\n"
            + active_text
            + f"\n📞 *Soporte:* {support_phone}"
        )
    return (
        "🔄 *TÉCNICO RETIRADO* 🔄\n\n"
        f"🆔 *Orden:* #{event.order_number}\n"
        f"👤 *Cliente:* {_client_name(event)}\n\n"
        f"❌ *Técnico retirado:* {removed}\n"
        + active_text
    )


def render_message(
    event: NotificationEvent,
    support_phone: str,
    technician: Optional[TechnicianContact] = None
) -> str:
    if event.event_type == NotificationType.ORDER_CREATED:
        return _order_created(event, support_phone)
    if event.event_type == NotificationType.STATUS_CHANGED:
        return _status_changed(event, support_phone)
    if event.event_type == NotificationType.PAYMENT_RECORDED:
        return _payment_recorded(event, support_phone)
    if event.event_type == NotificationType.TECHNICIAN_ASSIGNED:
        return _technician_assigned(event, support_phone, technician)
    return _technician_removed(event, support_phone, technician)
