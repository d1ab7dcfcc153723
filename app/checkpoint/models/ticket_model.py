from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from checkpoint.database import Base
from checkpoint.constant_file import DEFAULT_CURRENCY, DEFAULT_MAX_TRANSFERS

class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("ticket_categories.id", ondelete="SET NULL"), nullable=True)

    ticket_number = Column(String, nullable=False, unique=True, index=True)
    qr_code = Column(String, nullable=False, unique=True)

    # Commercial
    category = Column(String, nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    currency = Column(String, nullable=False, default=DEFAULT_CURRENCY)
    payment_method = Column(String, nullable=True)  # paystack, gateway, manual, free
    payment_status = Column(String, nullable=False, default="pending")  # pending, paid, failed
    payment_reference = Column(String, nullable=True, index=True)
    payment_amount = Column(Float, nullable=True)

    # Ownership
    owner_name = Column(String, nullable=False)
    owner_email = Column(String, nullable=False)
    owner_phone = Column(String, nullable=True)
    transfer_count = Column(Integer, nullable=False, default=0)
    max_transfers = Column(Integer, nullable=False, default=DEFAULT_MAX_TRANSFERS)
    is_transferable = Column(Boolean, nullable=False, default=True)

    status = Column(String, nullable=False, default="active")  # active, used, expired, cancelled
    expires_at = Column(DateTime, nullable=True)
    used_at = Column(DateTime, nullable=True)
    scanned_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event = relationship("Event", back_populates="tickets")
    transfers = relationship("TicketTransfer", back_populates="ticket", cascade="all, delete-orphan",
                             order_by="TicketTransfer.id")


class TicketTransfer(Base):
    __tablename__ = "ticket_transfers"

    id = Column(Integer, primary_key=True, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True)

    from_owner_name = Column(String, nullable=True)
    from_owner_email = Column(String, nullable=True)
    from_owner_phone = Column(String, nullable=True)
    to_owner_name = Column(String, nullable=False)
    to_owner_email = Column(String, nullable=False)
    to_owner_phone = Column(String, nullable=True)
    transfer_reason = Column(String, nullable=True)
    transfer_status = Column(String, nullable=False, default="completed")
    created_at = Column(DateTime, default=datetime.utcnow)

    ticket = relationship("Ticket", back_populates="transfers")
