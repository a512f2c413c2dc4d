"""Administrator model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, func
from campus_events.database import Base


class Admin(Base):
    """An administrator who creates and owns events."""
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String, nullable=False)
    college = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
