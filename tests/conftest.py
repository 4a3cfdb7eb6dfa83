"""
Shared fixtures: a file-backed SQLite database per test and small factories
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

import pytest
import pytest_asyncio
from sqlalchemy import event as sa_event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from evalo.core.exceptions import ClassificationUnavailableError
from evalo.db.base import Base
from evalo.models.course import Course
from evalo.models.event import Event, EventStatus
from evalo.models.feedback import Tone
from evalo.models.profile import Profile, ProfileRole
from evalo.schemas.sentiment import Classification
from evalo.services.sentiment import SentimentClassifier


class StubClassifier(SentimentClassifier):
    """Classifier answering from a fixed tone, a queue of tones, or failing"""

    def __init__(self, tone: Tone = Tone.POSITIVE, tones: Optional[List[Tone]] = None,
                 error: Optional[Exception] = None):
        self.tone = tone
        self.tones = list(tones or [])
        self.error = error
        self.calls: List[str] = []

    async def classify(self, text: str, show_details: Optional[bool] = None) -> Classification:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        tone = self.tones.pop(0) if self.tones else self.tone
        return Classification(tone=tone, confidence=0.9)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """SQLite engine with savepoint support and serialised write transactions"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'evalo.db'}",
        connect_args={"timeout": 30},
    )

    @sa_event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        # let SQLAlchemy emit BEGIN itself so SAVEPOINT works
        dbapi_connection.isolation_level = None

    @sa_event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def classifier():
    return StubClassifier()


@pytest.fixture
def stub_classifier_cls():
    return StubClassifier


@pytest.fixture
def unavailable_classifier():
    return StubClassifier(error=ClassificationUnavailableError("Sentiment service unreachable"))


@pytest.fixture
def organization_id():
    return uuid.uuid4()


@pytest.fixture
def make_profile(session_factory, organization_id):
    async def _make_profile(role: ProfileRole = ProfileRole.TEACHER, organization: Optional[uuid.UUID] = None) -> Profile:
        async with session_factory() as session:
            profile = Profile(
                email=f"{uuid.uuid4().hex[:8]}@school.example",
                full_name="Test Teacher",
                role=role.value,
                organization_id=organization or organization_id,
            )
            session.add(profile)
            await session.commit()
            await session.refresh(profile)
            return profile

    return _make_profile


@pytest.fixture
def make_course(session_factory):
    async def _make_course(owner: Profile, name: str = "Algorithms", code: str = "CS201") -> Course:
        async with session_factory() as session:
            course = Course(
                owner_id=owner.id,
                name=name,
                code=code,
                organization_id=owner.organization_id,
            )
            session.add(course)
            await session.commit()
            await session.refresh(course)
            return course

    return _make_course


@pytest.fixture
def make_event(session_factory):
    async def _make_event(course: Course, entry_code: str = "AB12",
                          status: EventStatus = EventStatus.OPEN,
                          event_date: Optional[datetime] = None) -> Event:
        async with session_factory() as session:
            event = Event(
                course_id=course.id,
                event_date=event_date or datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc),
                status=status.value,
                entry_code=entry_code,
                organization_id=course.organization_id,
            )
            session.add(event)
            await session.commit()
            await session.refresh(event)
            return event

    return _make_event
