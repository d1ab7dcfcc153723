import logging
from fastapi import APIRouter, Response, status, Depends
from sqlalchemy.orm import Session
from checkpoint.database import get_db
from checkpoint.controller.ticket_controller import *
from checkpoint.controller.payment_gateway import get_payment_gateway
from checkpoint.controller.ws_manager import get_attendance_notifier
from checkpoint.exceptions import PaymentGatewayError
from checkpoint.schema.ticket_schema import (TicketPurchase, TicketTransferRequest, TicketValidationRequest,
                                             TicketPaymentRequest, PaymentVerificationRequest)
from checkpoint.response_model import ResponseModel, ErrorResponseModel, serialize

logger = logging.getLogger(__name__)

router = APIRouter()


def _ticket_response(response: Response, result: dict):
    if result["success"]:
        return ResponseModel(result, result["message"])
    response.status_code = result["code"]
    return ErrorResponseModel(result, result["code"], result["message"])


def _gateway_failed(response: Response, e: PaymentGatewayError):
    response.status_code = status.HTTP_502_BAD_GATEWAY
    return ErrorResponseModel("Payment gateway error", 502, str(e))


def _operation_failed(response: Response, db: Session, e: Exception):
    db.rollback()
    logger.exception("Ticket operation failed unexpectedly")
    response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return ErrorResponseModel("operation failed", 500, str(e))


# ----------------------- Purchase ticket -----------------------
@router.post("/purchase", response_description="Purchase a ticket")
async def purchase_ticket(response: Response, purchase: TicketPurchase, db: Session = Depends(get_db),
                          gateway=Depends(get_payment_gateway)):
    try:
        result = await purchase_ticket_controller(db, purchase.model_dump(), gateway)
    except PaymentGatewayError as e:
        return _gateway_failed(response, e)
    except Exception as e:
        return _operation_failed(response, db, e)
    return _ticket_response(response, result)


# ----------------------- Initialize payment -----------------------
@router.post("/initialize-payment", response_description="Open a payment session for a ticket")
async def initialize_payment(response: Response, request: TicketPaymentRequest, db: Session = Depends(get_db),
                             gateway=Depends(get_payment_gateway)):
    try:
        result = await initialize_ticket_payment_controller(db, request.ticket_id, gateway)
    except PaymentGatewayError as e:
        return _gateway_failed(response, e)
    except Exception as e:
        return _operation_failed(response, db, e)
    return _ticket_response(response, result)


# ----------------------- Verify payment -----------------------
@router.post("/verify-payment", response_description="Confirm a ticket payment")
async def verify_payment(response: Response, request: PaymentVerificationRequest, db: Session = Depends(get_db),
                         gateway=Depends(get_payment_gateway)):
    try:
        result = await verify_ticket_payment_controller(db, request.reference, gateway)
    except PaymentGatewayError as e:
        return _gateway_failed(response, e)
    except Exception as e:
        return _operation_failed(response, db, e)
    return _ticket_response(response, result)


# ----------------------- Tickets of an event -----------------------
@router.get("/event/{event_id}", response_description="Tickets sold for an event")
async def get_event_tickets(event_id: int, db: Session = Depends(get_db)):
    tickets = await retrieve_event_tickets_controller(db, event_id)
    return ResponseModel([serialize(ticket) for ticket in tickets], "Tickets retrieved successfully")


# ----------------------- Transfer ticket -----------------------
@router.post("/{ticket_ref}/transfer", response_description="Transfer a ticket to a new owner")
async def transfer_ticket(response: Response, ticket_ref: str, transfer: TicketTransferRequest,
                          db: Session = Depends(get_db)):
    new_owner = {
        "name": transfer.to_owner_name,
        "email": transfer.to_owner_email,
        "phone": transfer.to_owner_phone,
    }
    try:
        result = await transfer_ticket_controller(db, ticket_ref, new_owner, transfer.transfer_reason)
    except Exception as e:
        return _operation_failed(response, db, e)
    return _ticket_response(response, result)


# ----------------------- Validate ticket -----------------------
@router.post("/{ticket_ref}/validate", response_description="Validate a ticket at the entrance")
async def validate_ticket(response: Response, ticket_ref: str, request: TicketValidationRequest,
                          db: Session = Depends(get_db), notifier=Depends(get_attendance_notifier)):
    try:
        result = await validate_ticket_controller(db, ticket_ref, request.operator_id, notifier)
    except Exception as e:
        return _operation_failed(response, db, e)
    return _ticket_response(response, result)


# ----------------------- Transfer history -----------------------
@router.get("/{ticket_ref}/transfers", response_description="Transfer history of a ticket")
async def get_ticket_transfers(response: Response, ticket_ref: str, db: Session = Depends(get_db)):
    transfers = await retrieve_ticket_transfers_controller(db, ticket_ref)
    if transfers is None:
        response.status_code = status.HTTP_404_NOT_FOUND
        return ErrorResponseModel("Not found", 404, "Ticket not found")
    return ResponseModel([serialize(transfer) for transfer in transfers], "Transfers retrieved successfully")


# ----------------------- Get ticket -----------------------
@router.get("/{ticket_ref}", response_description="Retrieve a ticket by id or ticket number")
async def get_ticket(response: Response, ticket_ref: str, db: Session = Depends(get_db)):
    ticket = await retrieve_ticket_controller(db, ticket_ref)
    if not ticket:
        response.status_code = status.HTTP_404_NOT_FOUND
        return ErrorResponseModel("Not found", 404, "Ticket not found")
    return ResponseModel(serialize(ticket), "Ticket retrieved successfully")


__all__ = ["router"]
