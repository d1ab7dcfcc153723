#!/usr/bin/env python3
"""
Script to create database tables
Run this after the database is created to set up all tables
"""
import logging
import sys
import os

# Add the app directory to the path
app_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'app')
sys.path.insert(0, app_dir)

from sqlalchemy.exc import SQLAlchemyError

from checkpoint.database import Base, engine
from checkpoint.logging_config import setup_logging
from checkpoint.models.event_model import Event, TicketCategory
from checkpoint.models.member_model import Member
from checkpoint.models.registration_model import Registration
from checkpoint.models.roster_model import RosterUpload
from checkpoint.models.attendance_model import Attendance
from checkpoint.models.ticket_model import Ticket, TicketTransfer

logger = logging.getLogger("create_tables")


def create_tables():
    """Create all database tables"""
    try:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("✅ Database tables created successfully!")
        return True
    except SQLAlchemyError as e:
        logger.error(f"❌ Error creating tables: {e}")
        return False

if __name__ == "__main__":
    setup_logging()
    sys.exit(0 if create_tables() else 1)
