from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from evalo.models.event import EventStatus


class EventCreate(BaseModel):
    """Create a feedback session; the entry code is generated server-side"""
    event_date: datetime = Field(..., description="When the session takes place")


class EventUpdate(BaseModel):
    event_date: Optional[datetime] = None


class EventStatusUpdate(BaseModel):
    status: EventStatus


class EventCounters(BaseModel):
    positive: int = 0
    negative: int = 0
    neutral: int = 0
    total: int = 0


class Event(BaseModel):
    """Event response model"""
    id: UUID
    course_id: UUID
    event_date: datetime
    status: EventStatus
    entry_code: Optional[str] = None
    organization_id: Optional[UUID] = None
    positive_feedback_count: int
    negative_feedback_count: int
    neutral_feedback_count: int
    total_feedback_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventLookup(BaseModel):
    """What a student sees after entering a valid code"""
    course_name: str
    course_code: str
    event_date: datetime


class CounterReconciliation(BaseModel):
    """Result of recomputing an event's counters from its feedback rows"""
    event_id: UUID
    stored: EventCounters
    actual: EventCounters

    @property
    def drifted(self) -> bool:
        return self.stored != self.actual
