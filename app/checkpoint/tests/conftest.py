import os
from datetime import datetime, timedelta

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TOKEN_SECRET"] = "test-secret"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from checkpoint.database import Base
from checkpoint.models.event_model import Event, TicketCategory
from checkpoint.models.member_model import Member
from checkpoint.models.registration_model import Registration
from checkpoint.models.roster_model import RosterUpload
from checkpoint.models.attendance_model import Attendance
from checkpoint.models.ticket_model import Ticket, TicketTransfer


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_event(db):
    def _make(**fields):
        now = datetime.utcnow()
        values = {
            "name": "Annual Gathering",
            "location": "Main Hall",
            "start_date": now - timedelta(hours=1),
            "end_date": now + timedelta(hours=6),
            "event_type": "registration",
            "eligible_groups": [],
            "allow_guests": True,
            "allow_invitees": True,
        }
        values.update(fields)
        event = Event(**values)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make


@pytest.fixture
def make_member(db):
    def _make(**fields):
        values = {
            "first_name": "Amina",
            "last_name": "Bello",
            "email": "amina.bello@example.com",
            "chanda_number": "CH-1001",
            "group": "Lajna",
            "circuit": "Ikeja",
        }
        values.update(fields)
        member = Member(**values)
        db.add(member)
        db.commit()
        db.refresh(member)
        return member

    return _make


@pytest.fixture
def make_roster(db):
    def _make(event, rows, file_name="members.csv"):
        roster = RosterUpload(event_id=event.id, file_name=file_name, member_data=rows)
        db.add(roster)
        db.commit()
        db.refresh(roster)
        return roster

    return _make


@pytest.fixture
def ticket_event(make_event):
    return make_event(name="Fundraising Dinner", event_type="ticket", allow_guests=False, allow_invitees=False)


@pytest.fixture
def make_category(db):
    def _make(event, **fields):
        values = {"name": "Regular", "price": 5000.0, "currency": "NGN", "available": True}
        values.update(fields)
        category = TicketCategory(event_id=event.id, **values)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    return _make


@pytest.fixture
def make_ticket(db):
    def _make(event, **fields):
        values = {
            "ticket_number": "TKT000001",
            "qr_code": "a" * 32,
            "category": "Regular",
            "price": 5000.0,
            "currency": "NGN",
            "payment_method": "paystack",
            "payment_status": "paid",
            "owner_name": "Tunde Ade",
            "owner_email": "tunde@example.com",
            "status": "active",
            "expires_at": event.end_date + timedelta(hours=24) if event.end_date else None,
        }
        values.update(fields)
        ticket = Ticket(event_id=event.id, **values)
        db.add(ticket)
        db.commit()
        db.refresh(ticket)
        return ticket

    return _make
