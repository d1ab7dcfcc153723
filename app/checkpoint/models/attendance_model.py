from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from checkpoint.database import Base

class Attendance(Base):
    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    registration_id = Column(Integer, ForeignKey("registrations.id", ondelete="CASCADE"), nullable=True, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=True, index=True)

    scanned_by = Column(Integer, nullable=True)
    scanned_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    validation_status = Column(String, nullable=False)  # valid
    method = Column(String, nullable=False)  # qr_scan, manual_validation, csv-gated, ticket
    notes = Column(String, nullable=True)

    registration = relationship("Registration", back_populates="attendance")
