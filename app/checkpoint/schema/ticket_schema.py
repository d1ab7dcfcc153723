from pydantic import BaseModel, EmailStr
from typing import Optional

class TicketPurchase(BaseModel):
    event_id: int
    category_id: int
    owner_email: EmailStr
    owner_name: Optional[str] = None
    owner_phone: Optional[str] = None
    payment_method: str = "manual"


class TicketTransferRequest(BaseModel):
    to_owner_name: str
    to_owner_email: EmailStr
    to_owner_phone: Optional[str] = None
    transfer_reason: Optional[str] = None


class TicketValidationRequest(BaseModel):
    operator_id: Optional[int] = None


class TicketPaymentRequest(BaseModel):
    ticket_id: int


class PaymentVerificationRequest(BaseModel):
    reference: str
