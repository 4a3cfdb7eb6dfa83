import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, Uuid

from evalo.db.base_class import Base


class Tone(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Feedback(Base):
    """Anonymous student feedback; carries no reference to who wrote it"""
    __tablename__ = "feedback"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    tone = Column(String(20), nullable=False, index=True)  # set once from the classifier
    is_reviewed = Column(Boolean, nullable=False, default=False)
    organization_id = Column(Uuid, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def __repr__(self) -> str:
        return f"<Feedback {self.id} event={self.event_id} tone={self.tone}>"
