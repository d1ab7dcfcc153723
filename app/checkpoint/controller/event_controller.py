import logging
from sqlalchemy.orm import Session
from checkpoint.models.event_model import Event, TicketCategory

logger = logging.getLogger(__name__)

EVENT_TYPES = ("registration", "ticket")

# ------------------ Add New Event ------------------
async def add_event_controller(db: Session, event_data: dict):
    if event_data.get("event_type", "registration") not in EVENT_TYPES:
        raise ValueError(f"Unknown event type: {event_data['event_type']}")

    new_event = Event(**event_data)
    db.add(new_event)
    db.commit()
    db.refresh(new_event)

    logger.info(f"Created {new_event.event_type} event {new_event.id} ({new_event.name})")
    return new_event


# ------------------ Retrieve Event by id ------------------
async def retrieve_event_controller(db: Session, event_id: int):
    return db.query(Event).filter(Event.id == event_id).first()


# ------------------ Add Ticket Category ------------------
async def add_ticket_category_controller(db: Session, event_id: int, category_data: dict):
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        return None
    if event.event_type != "ticket":
        raise ValueError("Ticket categories can only be added to ticket events")

    category = TicketCategory(event_id=event.id, **category_data)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


# ------------------ Toggle category availability ------------------
async def set_ticket_category_availability(db: Session, category_id: int, available: bool):
    category = db.query(TicketCategory).filter(TicketCategory.id == category_id).first()
    if not category:
        return None
    category.available = available
    db.commit()
    db.refresh(category)
    return category
