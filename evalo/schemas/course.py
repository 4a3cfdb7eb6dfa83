from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CourseBase(BaseModel):
    """Course fields editable by its owner"""
    name: str = Field(..., min_length=1, max_length=255, description="Course name")
    code: str = Field(..., min_length=1, max_length=50, description="Course code, e.g. CS101")
    student_count: Optional[int] = Field(None, ge=0, description="Enrolled students")
    cycle: Optional[str] = Field(None, max_length=100, description="Academic cycle")
    teacher: Optional[str] = Field(None, max_length=255, description="Display name of the teacher")


class CourseCreate(CourseBase):
    pass


class CourseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    student_count: Optional[int] = Field(None, ge=0)
    cycle: Optional[str] = Field(None, max_length=100)
    teacher: Optional[str] = Field(None, max_length=255)


class Course(CourseBase):
    """Course response model"""
    id: UUID
    owner_id: UUID
    organization_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
