import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from checkpoint.routes.event_route import router as EventRouter
from checkpoint.routes.registration_route import router as RegistrationRouter
from checkpoint.routes.roster_route import router as RosterRouter
from checkpoint.routes.ticket_route import router as TicketRouter

from checkpoint.controller.ws_manager import ConnectionManager
from checkpoint.database import Base, engine
from checkpoint.logging_config import setup_logging
from checkpoint.models.event_model import Event, TicketCategory
from checkpoint.models.member_model import Member
from checkpoint.models.registration_model import Registration
from checkpoint.models.roster_model import RosterUpload
from checkpoint.models.attendance_model import Attendance
from checkpoint.models.ticket_model import Ticket, TicketTransfer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Create all tables (must be after importing all models)
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        logger.warning(f"Could not create database tables: {e}")
    app.state.attendance_manager = ConnectionManager()
    yield


app = FastAPI(title="Checkpoint", lifespan=lifespan)

app.include_router(EventRouter, tags=["Event"], prefix="/event")
app.include_router(RegistrationRouter, tags=["Registration"], prefix="/registration")
app.include_router(RosterRouter, tags=["Roster"], prefix="/roster")
app.include_router(TicketRouter, tags=["Ticket"], prefix="/ticket")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*", "http://localhost:3000", "http://localhost:3001"],
    allow_credentials=True,
    allow_methods=["POST", "GET", "OPTIONS", "DELETE", "PUT"],
    allow_headers=["*"],
)


@app.websocket("/ws/attendance")
async def attendance_feed(websocket: WebSocket):
    manager = websocket.app.state.attendance_manager
    await manager.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)
