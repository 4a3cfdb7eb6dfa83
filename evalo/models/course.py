import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Uuid, func

from evalo.db.base_class import Base


class Course(Base):
    """Course owned by a teacher; events hang off it"""
    __tablename__ = "courses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=False)
    student_count = Column(Integer, nullable=True)
    cycle = Column(String(100), nullable=True)
    teacher = Column(String(255), nullable=True)
    organization_id = Column(Uuid, nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<Course {self.code} {self.name}>"
