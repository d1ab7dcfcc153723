import logging
from fastapi import APIRouter, Response, status, Form, File, UploadFile, Depends
from sqlalchemy.orm import Session
from checkpoint.database import get_db
from checkpoint.controller.roster_controller import *
from checkpoint.response_model import ResponseModel, ErrorResponseModel, serialize

logger = logging.getLogger(__name__)

router = APIRouter()

# ----------------------- Upload roster CSV -----------------------
@router.post("/{event_id}/upload", response_description="Upload a member roster for an event")
async def upload_roster(
    response: Response,
    event_id: int,
    roster_file: UploadFile = File(..., description="CSV export of the member list."),
    uploaded_by: int = Form(None),
    db: Session = Depends(get_db)
):
    if not roster_file.filename or not roster_file.filename.lower().endswith(".csv"):
        response.status_code = status.HTTP_400_BAD_REQUEST
        return ErrorResponseModel("Invalid file", 400, "Only CSV files are allowed")

    try:
        content = (await roster_file.read()).decode("utf-8")
    except UnicodeDecodeError:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return ErrorResponseModel("Invalid file", 400, "Roster must be UTF-8 encoded")

    try:
        roster = await upload_roster_controller(db, event_id, roster_file.filename, content, uploaded_by)
    except ValueError as e:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return ErrorResponseModel("Invalid roster", 400, str(e))

    if not roster:
        response.status_code = status.HTTP_404_NOT_FOUND
        return ErrorResponseModel("Not found", 404, "Event not found")
    return ResponseModel(
        {"id": roster.id, "file_name": roster.file_name, "rows": len(roster.member_data)},
        "Roster uploaded successfully",
    )


# ----------------------- List rosters -----------------------
@router.get("/{event_id}", response_description="Rosters uploaded for an event")
async def get_rosters(event_id: int, db: Session = Depends(get_db)):
    rosters = await retrieve_rosters_controller(db, event_id)
    return ResponseModel([serialize(roster) for roster in rosters], "Rosters retrieved successfully")


# ----------------------- Delete roster -----------------------
@router.delete("/item/{roster_id}", response_description="Delete a roster upload")
async def delete_roster(response: Response, roster_id: int, db: Session = Depends(get_db)):
    roster = await delete_roster_controller(db, roster_id)
    if not roster:
        response.status_code = status.HTTP_404_NOT_FOUND
        return ErrorResponseModel("Not found", 404, "Roster not found or already deleted")
    return ResponseModel({"id": roster_id}, "Roster deleted successfully")


__all__ = ["router"]
