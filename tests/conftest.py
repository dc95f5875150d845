from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fieldbook.models import Base, Business, TeamMember, Client, Job, JobStatus


WEEKDAY_HOURS = {
    "monday": {"open": "09:00", "close": "17:00", "closed": False},
    "tuesday": {"open": "09:00", "close": "17:00", "closed": False},
    "wednesday": {"open": "09:00", "close": "17:00", "closed": False},
    "thursday": {"open": "09:00", "close": "17:00", "closed": False},
    "friday": {"open": "09:00", "close": "17:00", "closed": False},
    "saturday": {"open": "10:00", "close": "14:00", "closed": False},
    "sunday": {"open": None, "close": None, "closed": True},
}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_business(db):
    def _make(business_hours=None, team_size=0, timezone="UTC", name="Sparkle Cleaning"):
        business = Business(
            id=uuid4(),
            name=name,
            timezone=timezone,
            business_hours=business_hours,
            is_active=True,
        )
        db.add(business)
        for i in range(team_size):
            db.add(TeamMember(id=uuid4(), business_id=business.id, name=f"Worker {i + 1}"))
        db.commit()
        db.refresh(business)
        return business

    return _make


@pytest.fixture
def business(make_business):
    return make_business(business_hours=WEEKDAY_HOURS)


@pytest.fixture
def make_client(db):
    def _make(business, email=None, phone=None, name="Pat Customer"):
        client = Client(id=uuid4(), business_id=business.id, name=name, email=email, phone=phone)
        db.add(client)
        db.commit()
        return client

    return _make


@pytest.fixture
def make_job(db):
    def _make(
            business,
            scheduled_at: datetime,
            duration=60,
            status=JobStatus.SCHEDULED.value,
            client=None,
            cost=None,
            time_is_set=True,
    ):
        job = Job(
            id=uuid4(),
            business_id=business.id,
            client_id=client.id if client else None,
            scheduled_at=scheduled_at,
            time_is_set=time_is_set,
            estimated_duration=duration,
            estimated_cost=Decimal(str(cost)) if cost is not None else None,
            status=status,
        )
        db.add(job)
        db.commit()
        return job

    return _make
