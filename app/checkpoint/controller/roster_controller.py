import logging
from sqlalchemy.orm import Session
from checkpoint.models.event_model import Event
from checkpoint.models.roster_model import RosterUpload
from checkpoint.controller.roster_matcher import parse_roster_csv

logger = logging.getLogger(__name__)


# ------------------ Upload roster CSV ------------------
async def upload_roster_controller(db: Session, event_id: int, file_name: str, content: str, uploaded_by: int = None):
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        return None

    rows = parse_roster_csv(content)
    roster = RosterUpload(
        event_id=event.id,
        file_name=file_name,
        uploaded_by=uploaded_by,
        member_data=rows,
    )
    db.add(roster)
    db.commit()
    db.refresh(roster)

    logger.info(f"✅ Roster {file_name} uploaded for event {event.id} with {len(rows)} rows")
    return roster


# ------------------ Retrieve rosters of an event ------------------
async def retrieve_rosters_controller(db: Session, event_id: int):
    return (
        db.query(RosterUpload)
        .filter(RosterUpload.event_id == event_id)
        .order_by(RosterUpload.id)
        .all()
    )


# ------------------ Delete roster ------------------
async def delete_roster_controller(db: Session, roster_id: int):
    roster = db.query(RosterUpload).filter(RosterUpload.id == roster_id).first()
    if not roster:
        return None

    event_id = roster.event_id
    db.delete(roster)
    db.commit()
    logger.info(f"Roster {roster_id} deleted from event {event_id}")
    return roster
