from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from checkpoint.constant_file import DEFAULT_CURRENCY

class EventCreate(BaseModel):
    name: str
    location: str
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    registration_start_date: Optional[datetime] = None
    registration_end_date: Optional[datetime] = None
    event_type: str = "registration"
    eligible_groups: List[str] = []
    allow_guests: bool = False
    allow_invitees: bool = False
    created_by: Optional[int] = None

    class Config:
        extra = "ignore"


class TicketCategoryCreate(BaseModel):
    name: str
    price: float = 0.0
    currency: str = DEFAULT_CURRENCY
    available: bool = True

    class Config:
        extra = "ignore"
