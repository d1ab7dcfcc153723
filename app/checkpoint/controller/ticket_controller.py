import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Dict
from sqlalchemy.orm import Session
from checkpoint.constant_file import DEFAULT_MAX_TRANSFERS, EVENT_GRACE_HOURS, SHORT_CODE_ATTEMPTS
from checkpoint.controller.payment_gateway import (convert_from_minor_units,
                                                   convert_to_minor_units,
                                                   generate_payment_reference,
                                                   get_payment_gateway)
from checkpoint.controller.qr_codec import mint_qr_reference, mint_ticket_number
from checkpoint.controller.ws_manager import notify
from checkpoint.models.attendance_model import Attendance
from checkpoint.models.event_model import Event, TicketCategory
from checkpoint.models.ticket_model import Ticket, TicketTransfer
from checkpoint.response_model import serialize

logger = logging.getLogger(__name__)

ONLINE_PAYMENT_METHODS = ("paystack", "gateway")
PAYMENT_METHODS = ONLINE_PAYMENT_METHODS + ("manual", "free")


def _fail(code: int, message: str, **extra):
    result = {"code": code, "success": False, "message": message}
    result.update(extra)
    return result


def find_ticket(db: Session, ticket_ref):
    """Look a ticket up by numeric id or by its ticket number."""
    ref = str(ticket_ref).strip()
    if ref.isdigit():
        return db.query(Ticket).filter(Ticket.id == int(ref)).first()
    return db.query(Ticket).filter(Ticket.ticket_number == ref.upper()).first()


def _unique_ticket_number(db: Session):
    for _ in range(SHORT_CODE_ATTEMPTS):
        ticket_number = mint_ticket_number()
        if not db.query(Ticket.id).filter(Ticket.ticket_number == ticket_number).first():
            return ticket_number
    raise RuntimeError("Could not allocate a unique ticket number")


def _ticket_expiry(event: Event):
    if event.end_date is None:
        return None
    return event.end_date + timedelta(hours=EVENT_GRACE_HOURS)


# ------------------ Purchase ticket ------------------
async def purchase_ticket_controller(db: Session, purchase_data: Dict[str, Any], gateway=None):
    event = db.query(Event).filter(Event.id == purchase_data.get("event_id")).first()
    if not event:
        return _fail(404, "Event not found")
    if event.event_type != "ticket":
        return _fail(400, "This is not a ticket-based event")

    now = datetime.utcnow()
    sales_start = event.registration_start_date or event.start_date
    sales_end = event.registration_end_date or event.end_date or event.start_date
    if now < sales_start:
        return _fail(400, "Ticket sales haven't started yet")
    if now > sales_end:
        return _fail(400, "Ticket sales have ended")

    category = (
        db.query(TicketCategory)
        .filter(TicketCategory.id == purchase_data.get("category_id"), TicketCategory.event_id == event.id)
        .first()
    )
    if not category:
        return _fail(400, "Invalid ticket category selected")
    if not category.available:
        return _fail(400, "This ticket category is no longer available")

    payment_method = purchase_data.get("payment_method") or "manual"
    if payment_method not in PAYMENT_METHODS:
        return _fail(400, f"Unsupported payment method: {payment_method}")

    owner_email = purchase_data["owner_email"].strip()
    is_free = (category.price or 0) <= 0
    if payment_method == "free" and not is_free:
        return _fail(400, "This ticket category is not free")

    ticket = Ticket(
        event_id=event.id,
        category_id=category.id,
        ticket_number=_unique_ticket_number(db),
        qr_code=mint_qr_reference(),
        category=category.name,
        price=category.price or 0.0,
        currency=category.currency,
        payment_method="free" if is_free else payment_method,
        payment_status="paid" if is_free else "pending",
        owner_name=purchase_data.get("owner_name") or owner_email.split("@")[0],
        owner_email=owner_email,
        owner_phone=purchase_data.get("owner_phone"),
        transfer_count=0,
        max_transfers=DEFAULT_MAX_TRANSFERS,
        is_transferable=True,
        status="active",
        expires_at=_ticket_expiry(event),
    )
    db.add(ticket)

    if is_free or payment_method not in ONLINE_PAYMENT_METHODS:
        db.commit()
        db.refresh(ticket)
        logger.info(f"Ticket {ticket.ticket_number} issued for event {event.id} ({ticket.payment_status})")
        message = "Free ticket created successfully." if is_free else "Ticket reserved. Complete payment to activate."
        return {
            "code": 200,
            "success": True,
            "message": message,
            "ticket_id": ticket.id,
            "ticket_number": ticket.ticket_number,
            "payment_url": None,
        }

    # Row is flushed for its id but only committed once the gateway session exists
    gateway = gateway or get_payment_gateway()
    db.flush()
    reference = generate_payment_reference(f"TKT{ticket.id}")
    try:
        session = await asyncio.to_thread(
            gateway.initialize_payment,
            ticket.owner_email,
            convert_to_minor_units(ticket.price),
            reference,
            {
                "ticketId": ticket.id,
                "eventId": event.id,
                "ticketCategoryId": category.id,
                "ticketType": category.name,
                "ownerName": ticket.owner_name,
                "eventName": event.name,
            },
        )
    except Exception:
        db.rollback()
        logger.error(f"Payment session failed for event {event.id}; ticket discarded")
        raise

    ticket.payment_reference = reference
    db.commit()
    db.refresh(ticket)

    logger.info(f"Ticket {ticket.ticket_number} awaiting payment {reference}")
    return {
        "code": 200,
        "success": True,
        "message": "Complete payment to activate your ticket.",
        "ticket_id": ticket.id,
        "ticket_number": ticket.ticket_number,
        "payment_url": session.get("authorization_url"),
        "reference": reference,
    }


# ------------------ Initialize payment for existing ticket ------------------
async def initialize_ticket_payment_controller(db: Session, ticket_id: int, gateway=None):
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if not ticket:
        return _fail(404, "Ticket not found")
    if ticket.payment_status == "paid":
        return _fail(400, "Ticket has already been paid for")
    if ticket.payment_method not in ONLINE_PAYMENT_METHODS:
        return _fail(400, "This ticket does not support online payment")

    gateway = gateway or get_payment_gateway()
    reference = generate_payment_reference(f"TKT{ticket.id}")
    session = await asyncio.to_thread(
        gateway.initialize_payment,
        ticket.owner_email,
        convert_to_minor_units(ticket.price),
        reference,
        {"ticketId": ticket.id, "ticketNumber": ticket.ticket_number, "eventId": ticket.event_id},
    )

    ticket.payment_reference = reference
    db.commit()
    return {
        "code": 200,
        "success": True,
        "message": "Payment session created",
        "authorization_url": session.get("authorization_url"),
        "reference": reference,
    }


# ------------------ Verify payment callback ------------------
async def verify_ticket_payment_controller(db: Session, reference: str, gateway=None):
    gateway = gateway or get_payment_gateway()
    data = await asyncio.to_thread(gateway.verify_payment, reference)

    ticket = db.query(Ticket).filter(Ticket.payment_reference == reference).first()
    if not ticket:
        ticket_id = (data.get("metadata") or {}).get("ticketId")
        if ticket_id is not None:
            ticket = db.query(Ticket).filter(Ticket.id == int(ticket_id)).first()
    if not ticket:
        return _fail(404, "Ticket not found")

    gateway_status = data.get("status")
    if gateway_status != "success":
        if gateway_status == "failed" and ticket.payment_status != "paid":
            ticket.payment_status = "failed"
            db.commit()
        logger.info(f"Payment {reference} not successful ({gateway_status})")
        return _fail(400, "Payment verification failed")

    paid_amount = data.get("amount") or 0
    if paid_amount < convert_to_minor_units(ticket.price):
        logger.warning(f"Payment {reference} short: {paid_amount} for ticket {ticket.id}")
        return _fail(400, "Payment amount does not match ticket price")

    ticket.payment_status = "paid"
    ticket.payment_amount = convert_from_minor_units(paid_amount)
    db.commit()

    logger.info(f"✅ Ticket {ticket.ticket_number} paid ({reference})")
    return {"code": 200, "success": True, "message": "Payment verified successfully", "ticket_id": ticket.id}


# ------------------ Transfer ticket ------------------
async def transfer_ticket_controller(db: Session, ticket_ref, new_owner: Dict[str, Any], reason: str = None):
    ticket = find_ticket(db, ticket_ref)
    if not ticket:
        return _fail(404, "Ticket not found")

    if not ticket.is_transferable or ticket.status != "active" or ticket.payment_status != "paid":
        return _fail(400, "Ticket cannot be transferred")
    if ticket.transfer_count >= ticket.max_transfers:
        return _fail(400, "Maximum transfer limit reached")

    observed_count = ticket.transfer_count
    transfer = TicketTransfer(
        ticket_id=ticket.id,
        from_owner_name=ticket.owner_name,
        from_owner_email=ticket.owner_email,
        from_owner_phone=ticket.owner_phone,
        to_owner_name=new_owner["name"],
        to_owner_email=new_owner["email"],
        to_owner_phone=new_owner.get("phone"),
        transfer_reason=reason,
        transfer_status="completed",
    )

    claimed = (
        db.query(Ticket)
        .filter(Ticket.id == ticket.id,
                Ticket.transfer_count == observed_count,
                Ticket.status == "active")
        .update({
            "owner_name": new_owner["name"],
            "owner_email": new_owner["email"],
            "owner_phone": new_owner.get("phone"),
            "transfer_count": observed_count + 1,
        }, synchronize_session=False)
    )
    if claimed != 1:
        db.rollback()
        return _fail(409, "Ticket changed during transfer, please retry")

    db.add(transfer)
    db.commit()
    db.refresh(ticket)

    logger.info(f"Ticket {ticket.ticket_number} transferred ({ticket.transfer_count}/{ticket.max_transfers})")
    return {
        "code": 200,
        "success": True,
        "status": "transferred",
        "message": "Ticket transferred successfully",
        "ticket": serialize(ticket),
    }


# ------------------ Validate ticket at entry ------------------
async def validate_ticket_controller(db: Session, ticket_ref, operator_id: int = None, notifier=None):
    ticket = find_ticket(db, ticket_ref)
    if not ticket:
        return _fail(404, "Ticket not found")

    if ticket.status == "used":
        return _fail(400, "Ticket already used",
                     used_at=ticket.used_at.isoformat() if ticket.used_at else None)

    if ticket.payment_status != "paid":
        return _fail(400, "Payment required. Please complete payment before entry.",
                     requires_payment=True,
                     payment_status=ticket.payment_status,
                     payment_method=ticket.payment_method)

    if ticket.status != "active":
        return _fail(400, "Ticket is not active")

    now = datetime.utcnow()
    if ticket.expires_at and now > ticket.expires_at:
        db.query(Ticket).filter(Ticket.id == ticket.id, Ticket.status == "active") \
            .update({"status": "expired"}, synchronize_session=False)
        db.commit()
        logger.info(f"Ticket {ticket.ticket_number} expired at {ticket.expires_at}")
        return _fail(400, "Ticket has expired")

    claimed = (
        db.query(Ticket)
        .filter(Ticket.id == ticket.id, Ticket.status == "active", Ticket.payment_status == "paid")
        .update({"status": "used", "used_at": now, "scanned_by": operator_id}, synchronize_session=False)
    )
    if claimed != 1:
        db.rollback()
        db.refresh(ticket)
        return _fail(400, "Ticket already used",
                     used_at=ticket.used_at.isoformat() if ticket.used_at else None)

    db.add(Attendance(
        event_id=ticket.event_id,
        ticket_id=ticket.id,
        scanned_by=operator_id,
        scanned_at=now,
        validation_status="valid",
        method="ticket",
    ))
    db.commit()
    db.refresh(ticket)

    logger.info(f"✅ Ticket {ticket.ticket_number} validated by operator {operator_id}")
    await notify(notifier, "ticket_validated", {
        "event_id": ticket.event_id,
        "ticket_number": ticket.ticket_number,
        "owner_name": ticket.owner_name,
        "used_at": now.isoformat(),
    })

    return {"code": 200, "success": True, "message": "Ticket validated successfully", "ticket": serialize(ticket)}


# ------------------ Retrieve tickets ------------------
async def retrieve_ticket_controller(db: Session, ticket_ref):
    return find_ticket(db, ticket_ref)


async def retrieve_event_tickets_controller(db: Session, event_id: int):
    return (
        db.query(Ticket)
        .filter(Ticket.event_id == event_id)
        .order_by(Ticket.created_at.desc(), Ticket.id.desc())
        .all()
    )


async def retrieve_ticket_transfers_controller(db: Session, ticket_ref):
    ticket = find_ticket(db, ticket_ref)
    if not ticket:
        return None
    return (
        db.query(TicketTransfer)
        .filter(TicketTransfer.ticket_id == ticket.id)
        .order_by(TicketTransfer.id)
        .all()
    )
