from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from checkpoint.database import Base

class RosterUpload(Base):
    __tablename__ = "roster_uploads"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)

    file_name = Column(String, nullable=False)
    uploaded_by = Column(Integer, nullable=True)
    member_data = Column(JSON, nullable=False, default=list)  # one dict per CSV row, headers as keys
    created_at = Column(DateTime, default=datetime.utcnow)

    event = relationship("Event", back_populates="roster_uploads")
