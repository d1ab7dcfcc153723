from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from checkpoint.database import Base

class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=True, index=True)
    chanda_number = Column(String, nullable=True, unique=True)
    group = Column(String, nullable=False)       # auxiliary body
    circuit = Column(String, nullable=True)
    status = Column(String, nullable=False, default="active")  # active, inactive, online
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    registrations = relationship("Registration", back_populates="member")

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()
