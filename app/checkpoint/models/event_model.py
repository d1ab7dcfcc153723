from sqlalchemy import Column, Integer, String, Float, Text, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from checkpoint.database import Base

class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    registration_start_date = Column(DateTime, nullable=True)
    registration_end_date = Column(DateTime, nullable=True)

    event_type = Column(String, nullable=False, default="registration")  # registration, ticket
    eligible_groups = Column(JSON, nullable=False, default=list)
    allow_guests = Column(Boolean, nullable=False, default=False)
    allow_invitees = Column(Boolean, nullable=False, default=False)
    status = Column(String, nullable=False, default="upcoming")  # upcoming, active, completed, cancelled
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    ticket_categories = relationship("TicketCategory", back_populates="event", cascade="all, delete-orphan")
    registrations = relationship("Registration", back_populates="event", cascade="all, delete-orphan")
    roster_uploads = relationship("RosterUpload", back_populates="event", cascade="all, delete-orphan")
    tickets = relationship("Ticket", back_populates="event", cascade="all, delete-orphan")


class TicketCategory(Base):
    __tablename__ = "ticket_categories"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)

    name = Column(String, nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    currency = Column(String, nullable=False, default="NGN")
    available = Column(Boolean, nullable=False, default=True)

    event = relationship("Event", back_populates="ticket_categories")
