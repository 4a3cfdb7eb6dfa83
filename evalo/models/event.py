import uuid
from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Uuid, func, text
from sqlalchemy.orm import relationship

from evalo.db.base_class import Base


class EventStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    ARCHIVED = "archived"


class Event(Base):
    """
    Feedback-collection session of a course

    The four ``*_feedback_count`` columns are denormalised counts of the
    event's feedback rows and are only written through EventCounterStore.
    """
    __tablename__ = "events"

    __table_args__ = (
        CheckConstraint("positive_feedback_count >= 0", name="ck_events_positive_nonneg"),
        CheckConstraint("negative_feedback_count >= 0", name="ck_events_negative_nonneg"),
        CheckConstraint("neutral_feedback_count >= 0", name="ck_events_neutral_nonneg"),
        CheckConstraint("total_feedback_count >= 0", name="ck_events_total_nonneg"),
        Index(
            "uq_events_open_entry_code",
            "entry_code",
            unique=True,
            postgresql_where=text("status = 'open'"),
            sqlite_where=text("status = 'open'"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    event_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default=EventStatus.OPEN.value, index=True)
    entry_code = Column(String(4), nullable=True, index=True, comment="Unique among open events")
    organization_id = Column(Uuid, nullable=True, index=True)

    positive_feedback_count = Column(Integer, nullable=False, default=0, server_default="0")
    negative_feedback_count = Column(Integer, nullable=False, default=0, server_default="0")
    neutral_feedback_count = Column(Integer, nullable=False, default=0, server_default="0")
    total_feedback_count = Column(Integer, nullable=False, default=0, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    course = relationship("Course", lazy="joined", innerjoin=True)

    @property
    def is_open(self) -> bool:
        return self.status == EventStatus.OPEN.value

    def __repr__(self) -> str:
        return f"<Event {self.id} code={self.entry_code} status={self.status}>"
