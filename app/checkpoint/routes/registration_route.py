import logging
from fastapi import APIRouter, Response, status, Depends
from sqlalchemy.orm import Session
from checkpoint.database import get_db
from checkpoint.controller.registration_controller import *
from checkpoint.controller.ws_manager import get_attendance_notifier
from checkpoint.schema.registration_schema import RegistrationCreate
from checkpoint.schema.token_schema import ScanRequest, CodeValidationRequest, EnhancedValidationRequest
from checkpoint.response_model import ResponseModel, ErrorResponseModel, serialize

logger = logging.getLogger(__name__)

router = APIRouter()


def _validation_response(response: Response, result: dict):
    if result["validation_status"] == "valid":
        return ResponseModel(result, result["message"])
    response.status_code = result["code"]
    return ErrorResponseModel(result, result["code"], result["message"])


def _operation_failed(response: Response, db: Session, e: Exception):
    db.rollback()
    logger.exception("Validation failed unexpectedly")
    response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return ErrorResponseModel("operation failed", 500, str(e))


# ----------------------- Register for Event -----------------------
@router.post("/{event_id}/register", response_description="Register for an event")
async def register_for_event(response: Response, event_id: int, registration: RegistrationCreate,
                             db: Session = Depends(get_db)):
    try:
        new_registration = await add_registration_controller(db, event_id, registration.model_dump())
    except ValueError as e:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return ErrorResponseModel("Registration refused", 400, str(e))
    except Exception as e:
        return _operation_failed(response, db, e)

    if not new_registration:
        response.status_code = status.HTTP_404_NOT_FOUND
        return ErrorResponseModel("Not found", 404, "Event not found")
    return ResponseModel(serialize(new_registration), "Registration successful")


# ----------------------- Scan QR code -----------------------
@router.post("/scan", response_description="Validate a scanned QR code")
async def scan_qr_code(response: Response, scan: ScanRequest, db: Session = Depends(get_db),
                       notifier=Depends(get_attendance_notifier)):
    try:
        result = await scan_registration_controller(db, scan.qr_data, scan.operator_id, notifier)
    except Exception as e:
        return _operation_failed(response, db, e)
    return _validation_response(response, result)


# ----------------------- Validate by short code -----------------------
@router.post("/validate-id", response_description="Validate a registration by its short code")
async def validate_by_code(response: Response, request: CodeValidationRequest, db: Session = Depends(get_db),
                           notifier=Depends(get_attendance_notifier)):
    try:
        result = await validate_by_code_controller(db, request.unique_id, request.operator_id, notifier)
    except Exception as e:
        return _operation_failed(response, db, e)
    return _validation_response(response, result)


# ----------------------- Enhanced validation -----------------------
@router.post("/validate-enhanced", response_description="Validate a short code against a given event")
async def validate_enhanced(response: Response, request: EnhancedValidationRequest,
                            db: Session = Depends(get_db), notifier=Depends(get_attendance_notifier)):
    try:
        result = await validate_enhanced_controller(db, request.unique_id, request.event_id,
                                                    request.operator_id, request.validation_type, notifier)
    except Exception as e:
        return _operation_failed(response, db, e)
    return _validation_response(response, result)


# ----------------------- Cancel registration -----------------------
@router.post("/{registration_id}/cancel", response_description="Cancel a registration")
async def cancel_registration(response: Response, registration_id: int, db: Session = Depends(get_db)):
    registration = await cancel_registration_controller(db, registration_id)
    if not registration:
        response.status_code = status.HTTP_404_NOT_FOUND
        return ErrorResponseModel("Not found", 404, "Registration not found")
    return ResponseModel(serialize(registration), "Registration cancelled")


# ----------------------- Registration QR -----------------------
@router.get("/{registration_id}/qr", response_description="QR code of a registration")
async def get_registration_qr(response: Response, registration_id: int, db: Session = Depends(get_db)):
    qr = await retrieve_registration_qr_controller(db, registration_id)
    if not qr:
        response.status_code = status.HTTP_404_NOT_FOUND
        return ErrorResponseModel("Not found", 404, "Registration not found")
    return ResponseModel(qr, "QR code retrieved")


# ----------------------- Export attendance -----------------------
@router.get("/event/{event_id}/export-attendance", response_description="Attendance export of an event")
async def export_attendance(response: Response, event_id: int, db: Session = Depends(get_db)):
    export = await export_attendance_controller(db, event_id)
    if not export:
        response.status_code = status.HTTP_404_NOT_FOUND
        return ErrorResponseModel("Not found", 404, "Event not found")
    return ResponseModel(export, "Attendance exported")


__all__ = ["router"]
