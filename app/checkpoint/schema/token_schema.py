from pydantic import BaseModel, Field
from typing import Optional


class TokenPayload(BaseModel):
    """Decoded content of a registration QR code."""

    registration_id: Optional[int] = Field(default=None, alias="registrationId")
    event_id: Optional[int] = Field(default=None, alias="eventId")
    member_id: Optional[int] = Field(default=None, alias="memberId")
    kind: Optional[str] = Field(default=None, alias="type")
    issued_at: int = Field(default=0, alias="timestamp")  # epoch milliseconds, 0 for legacy codes

    class Config:
        populate_by_name = True
        extra = "ignore"


class ScanRequest(BaseModel):
    qr_data: str
    operator_id: Optional[int] = None


class CodeValidationRequest(BaseModel):
    unique_id: str
    operator_id: Optional[int] = None


class EnhancedValidationRequest(BaseModel):
    unique_id: str
    event_id: int
    operator_id: Optional[int] = None
    validation_type: Optional[str] = None
