"""Student model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, func
from campus_events.database import Base


class Student(Base):
    """A student who registers for and checks into events."""
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String, nullable=False)
    student_number = Column(String, unique=True, nullable=False)  # campus-issued student ID
    college = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
