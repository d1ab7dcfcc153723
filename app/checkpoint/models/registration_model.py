from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from checkpoint.database import Base

class Registration(Base):
    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="SET NULL"), nullable=True)

    kind = Column(String, nullable=False)  # member, guest, invitee
    token = Column(String, nullable=True, unique=True)
    short_code = Column(String(6), nullable=False, unique=True, index=True)

    # Snapshot taken at submission time, kept even when a member is linked
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    group = Column(String, nullable=True)
    chanda_number = Column(String, nullable=True)
    circuit = Column(String, nullable=True)

    status = Column(String, nullable=False, default="registered")  # registered, online, cancelled
    validation_method = Column(String, nullable=True)
    validated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event = relationship("Event", back_populates="registrations")
    member = relationship("Member", back_populates="registrations")
    attendance = relationship("Attendance", back_populates="registration")
