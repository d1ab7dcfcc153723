import logging
from datetime import datetime
from typing import Any, Dict
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from checkpoint.constant_file import SHORT_CODE_ATTEMPTS
from checkpoint.controller.qr_codec import (decode_token,
                                            generate_qr_image,
                                            is_token_live,
                                            mint_short_code,
                                            mint_token)
from checkpoint.controller.roster_matcher import RosterCandidate, matches, roster_check_required
from checkpoint.controller.ws_manager import notify
from checkpoint.exceptions import TokenDecodeError
from checkpoint.models.attendance_model import Attendance
from checkpoint.models.event_model import Event
from checkpoint.models.member_model import Member
from checkpoint.models.registration_model import Registration
from checkpoint.models.roster_model import RosterUpload
from checkpoint.response_model import serialize
from checkpoint.schema.token_schema import TokenPayload

logger = logging.getLogger(__name__)

REGISTRATION_KINDS = ("member", "guest", "invitee")
VALIDATED_STATUSES = ("online", "attended")


def _reject(code: int, validation_status: str, message: str, **extra):
    result = {"code": code, "validation_status": validation_status, "message": message}
    result.update(extra)
    return result


# ------------------ Add New Registration ------------------
async def add_registration_controller(db: Session, event_id: int, registration_data: Dict[str, Any]):
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        return None

    kind = registration_data.get("kind") or "guest"
    if kind not in REGISTRATION_KINDS:
        raise ValueError(f"Unknown registration type: {kind}")
    if event.event_type != "registration":
        raise ValueError("This event sells tickets; registrations are not accepted")
    if kind == "guest" and not event.allow_guests:
        raise ValueError("Guests are not allowed for this event")
    if kind == "invitee" and not event.allow_invitees:
        raise ValueError("Invitees are not allowed for this event")

    member = None
    member_id = registration_data.get("member_id")
    if member_id:
        member = db.query(Member).filter(Member.id == member_id).first()
        if not member:
            raise ValueError("Member not found")

    # Snapshot the identity fields so later member edits do not rewrite history
    snapshot = {
        "name": registration_data.get("name") or (member.full_name if member else None),
        "email": registration_data.get("email") or (member.email if member else None),
        "group": registration_data.get("group") or (member.group if member else None),
        "chanda_number": registration_data.get("chanda_number") or (member.chanda_number if member else None),
        "circuit": registration_data.get("circuit") or (member.circuit if member else None),
    }

    for attempt in range(SHORT_CODE_ATTEMPTS):
        short_code = mint_short_code()
        if db.query(Registration.id).filter(Registration.short_code == short_code).first():
            logger.warning(f"Short code collision on attempt {attempt + 1}, retrying")
            continue

        registration = Registration(
            event_id=event.id,
            member_id=member.id if member else None,
            kind=kind,
            short_code=short_code,
            status="registered",
            **snapshot,
        )
        db.add(registration)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            if not db.query(Registration.id).filter(Registration.short_code == short_code).first():
                raise
            logger.warning(f"Short code {short_code} taken concurrently, retrying")
            continue

        registration.token = mint_token(registration.id, event.id, registration.member_id, kind)
        db.commit()
        db.refresh(registration)

        logger.info(f"Registration {registration.id} ({kind}) created for event {event.id}")
        return registration

    raise RuntimeError("Could not allocate a unique short code")


# ------------------ Retrieve registration QR ------------------
async def retrieve_registration_qr_controller(db: Session, registration_id: int):
    registration = db.query(Registration).filter(Registration.id == registration_id).first()
    if not registration:
        return None
    return {
        "registration_id": registration.id,
        "token": registration.token,
        "short_code": registration.short_code,
        "qr_image": generate_qr_image(registration.token),
    }


# ------------------ Cancel registration (soft delete) ------------------
async def cancel_registration_controller(db: Session, registration_id: int):
    registration = db.query(Registration).filter(Registration.id == registration_id).first()
    if not registration:
        return None

    registration.status = "cancelled"
    db.commit()
    db.refresh(registration)
    logger.info(f"Registration {registration.id} cancelled")
    return registration


# ------------------ Validation pipeline ------------------
def _stored_payload(registration: Registration):
    """Payload of the token issued with the registration; legacy rows count as live."""
    if not registration.token:
        return TokenPayload()
    try:
        return decode_token(registration.token)
    except TokenDecodeError as e:
        logger.warning(f"Stored token of registration {registration.id} unreadable ({e}); treating as legacy")
        return TokenPayload()


def _roster_candidate(registration: Registration, member: Member):
    return RosterCandidate(
        name=registration.name or (member.full_name if member else None),
        email=registration.email or (member.email if member else None),
        membership_number=registration.chanda_number or (member.chanda_number if member else None),
    )


async def _validate_registration(db: Session, registration: Registration, event: Event,
                                 operator_id: int, method: str, notifier=None):
    """Run the remaining gates, then commit the check-in exactly once.

    Nothing is written until every gate has passed. The final status change is
    a conditional update on ``status == 'registered'`` so that two concurrent
    scans cannot both produce an attendance record.
    """
    if registration.status in VALIDATED_STATUSES:
        return _reject(400, "duplicate", "This registration has already been validated")
    if registration.status == "cancelled":
        return _reject(400, "invalid", "This registration has been cancelled")

    member = None
    if registration.member_id:
        member = db.query(Member).filter(Member.id == registration.member_id).first()

    group = registration.group or (member.group if member else None)
    if event.eligible_groups and group and group not in event.eligible_groups:
        return _reject(403, "invalid", f"{group} members not eligible for this event")

    rosters = db.query(RosterUpload).filter(RosterUpload.event_id == event.id).all()
    if roster_check_required(rosters, registration.kind):
        if not matches(rosters, _roster_candidate(registration, member)):
            logger.info(f"Registration {registration.id} not found in {len(rosters)} roster upload(s)")
            return _reject(
                403,
                "csv_validation_failed",
                "Member validation failed. Your information was not found in the member validation list. "
                "Please contact the event organizer.",
                details="Members must be validated against the uploaded member list for this event.",
            )

    now = datetime.utcnow()
    claimed = (
        db.query(Registration)
        .filter(Registration.id == registration.id, Registration.status == "registered")
        .update({"status": "online", "validation_method": method, "validated_at": now},
                synchronize_session=False)
    )
    if claimed != 1:
        db.rollback()
        logger.info(f"Registration {registration.id} was validated concurrently")
        return _reject(400, "duplicate", "This registration has already been validated")

    attendance = Attendance(
        event_id=event.id,
        registration_id=registration.id,
        scanned_by=operator_id,
        scanned_at=now,
        validation_status="valid",
        method=method,
    )
    db.add(attendance)
    if member:
        member.status = "online"
    db.commit()
    db.refresh(registration)
    db.refresh(attendance)

    logger.info(f"✅ Registration {registration.id} validated via {method} by operator {operator_id}")

    await notify(notifier, "attendance", {
        "event_id": event.id,
        "registration_id": registration.id,
        "name": registration.name,
        "method": method,
        "scanned_at": now.isoformat(),
    })

    return {
        "code": 200,
        "validation_status": "valid",
        "message": "Validation successful",
        "registration": serialize(registration),
        "event": serialize(event),
        "member": serialize(member),
        "attendance": serialize(attendance),
    }


async def scan_registration_controller(db: Session, token: str, operator_id: int = None, notifier=None):
    try:
        payload = decode_token(token)
    except TokenDecodeError as e:
        logger.info(f"Rejected scan: {e}")
        return _reject(400, "invalid", "Invalid QR code")

    registration = None
    if payload.registration_id is not None:
        registration = db.query(Registration).filter(Registration.id == payload.registration_id).first()
    if not registration or registration.event_id != payload.event_id:
        return _reject(404, "invalid", "Registration not found")

    event = db.query(Event).filter(Event.id == payload.event_id).first()
    if not event:
        return _reject(404, "invalid", "Event not found")

    if not is_token_live(payload, event.end_date):
        return _reject(400, "invalid", "QR code expired")

    return await _validate_registration(db, registration, event, operator_id, "qr_scan", notifier)


async def validate_by_code_controller(db: Session, short_code: str, operator_id: int = None, notifier=None):
    code = (short_code or "").strip().upper()
    registration = db.query(Registration).filter(Registration.short_code == code).first()
    if not registration:
        return _reject(404, "invalid", "Registration not found")

    event = db.query(Event).filter(Event.id == registration.event_id).first()
    if not event:
        return _reject(404, "invalid", "Event not found")

    if not is_token_live(_stored_payload(registration), event.end_date):
        return _reject(400, "invalid", "Registration code expired")

    return await _validate_registration(db, registration, event, operator_id, "manual_validation", notifier)


async def validate_enhanced_controller(db: Session, short_code: str, event_id: int, operator_id: int = None,
                                       validation_type: str = None, notifier=None):
    code = (short_code or "").strip().upper()
    registration = db.query(Registration).filter(Registration.short_code == code).first()
    if not registration:
        return _reject(404, "invalid", "Registration not found")

    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        return _reject(404, "invalid", "Event not found")
    if registration.event_id != event.id:
        return _reject(400, "invalid", "This registration belongs to a different event")

    if event.end_date and datetime.utcnow() > event.end_date:
        return _reject(400, "event_closed", "Event has ended")

    if not is_token_live(_stored_payload(registration), event.end_date):
        return _reject(400, "invalid", "Registration code expired")

    return await _validate_registration(db, registration, event, operator_id,
                                        validation_type or "csv-gated", notifier)


# ------------------ Export attendance ------------------
async def export_attendance_controller(db: Session, event_id: int):
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        return None

    registrations = (
        db.query(Registration)
        .filter(Registration.event_id == event_id)
        .order_by(Registration.id)
        .all()
    )
    attendance_by_registration = {
        record.registration_id: record
        for record in db.query(Attendance).filter(Attendance.event_id == event_id,
                                                  Attendance.registration_id.isnot(None))
    }

    rows = []
    for registration in registrations:
        record = attendance_by_registration.get(registration.id)
        rows.append({
            "registration_id": registration.id,
            "name": registration.name or "N/A",
            "group": registration.group or "N/A",
            "email": registration.email or "N/A",
            "kind": registration.kind,
            "status": registration.status,
            "attended": "Yes" if record else "No",
            "validated_at": record.scanned_at.isoformat() if record else "",
            "registered_at": registration.created_at.isoformat() if registration.created_at else "",
        })

    return {"event": serialize(event), "registrations": rows}
