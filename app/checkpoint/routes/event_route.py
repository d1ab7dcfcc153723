import logging
from fastapi import APIRouter, Response, status, Depends
from sqlalchemy.orm import Session
from checkpoint.database import get_db
from checkpoint.controller.event_controller import *
from checkpoint.schema.event_schema import EventCreate, TicketCategoryCreate
from checkpoint.response_model import ResponseModel, ErrorResponseModel, serialize

logger = logging.getLogger(__name__)

router = APIRouter()

# ----------------------- ADD Event -----------------------
@router.post("/add", response_description="Create a new event")
async def add_event_data(response: Response, event: EventCreate, db: Session = Depends(get_db)):
    try:
        new_event = await add_event_controller(db, event.model_dump())
        return ResponseModel(serialize(new_event), "Event created successfully")
    except ValueError as e:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return ErrorResponseModel("Invalid event", 400, str(e))
    except Exception as e:
        db.rollback()
        logger.exception("Event creation failed")
        response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return ErrorResponseModel("An unexpected error occurred during event creation", 500, str(e))


# ----------------------- GET Event -----------------------
@router.get("/{event_id}", response_description="Retrieve an event")
async def get_event(response: Response, event_id: int, db: Session = Depends(get_db)):
    event = await retrieve_event_controller(db, event_id)
    if not event:
        response.status_code = status.HTTP_404_NOT_FOUND
        return ErrorResponseModel("Not found", 404, "Event not found")
    data = serialize(event)
    data["ticket_categories"] = [serialize(category) for category in event.ticket_categories]
    return ResponseModel(data, "Event retrieved successfully")


# ----------------------- ADD Ticket Category -----------------------
@router.post("/{event_id}/ticket-category", response_description="Add a ticket category")
async def add_ticket_category(response: Response, event_id: int, category: TicketCategoryCreate,
                              db: Session = Depends(get_db)):
    try:
        new_category = await add_ticket_category_controller(db, event_id, category.model_dump())
    except ValueError as e:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return ErrorResponseModel("Invalid category", 400, str(e))
    if not new_category:
        response.status_code = status.HTTP_404_NOT_FOUND
        return ErrorResponseModel("Not found", 404, "Event not found")
    return ResponseModel(serialize(new_category), "Ticket category added successfully")


# ----------------------- Toggle Ticket Category -----------------------
@router.put("/ticket-category/{category_id}/availability", response_description="Open or close a category")
async def update_ticket_category_availability(response: Response, category_id: int, available: bool,
                                              db: Session = Depends(get_db)):
    category = await set_ticket_category_availability(db, category_id, available)
    if not category:
        response.status_code = status.HTTP_404_NOT_FOUND
        return ErrorResponseModel("Not found", 404, "Ticket category not found")
    return ResponseModel(serialize(category), "Ticket category updated")


__all__ = ["router"]
