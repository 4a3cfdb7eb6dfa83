import uuid
from enum import Enum

from sqlalchemy import Column, DateTime, String, Uuid, func

from evalo.db.base_class import Base


class ProfileRole(str, Enum):
    TEACHER = "teacher"
    DEAN = "dean"


class Profile(Base):
    """
    Teacher or dean account, keyed by the auth provider's user ID

    Rows are provisioned alongside sign-up by the auth provider; this
    service only reads them to authorise teacher operations.
    """
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=ProfileRole.TEACHER.value)
    department = Column(String(255), nullable=True)
    organization_id = Column(Uuid, nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def is_dean(self) -> bool:
        return self.role == ProfileRole.DEAN.value

    def __repr__(self) -> str:
        return f"<Profile {self.email} ({self.role})>"
