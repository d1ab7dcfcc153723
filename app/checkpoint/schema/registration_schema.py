from pydantic import BaseModel, EmailStr
from typing import Optional

class RegistrationCreate(BaseModel):
    kind: str = "guest"
    member_id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    group: Optional[str] = None
    chanda_number: Optional[str] = None
    circuit: Optional[str] = None

    class Config:
        extra = "ignore"
