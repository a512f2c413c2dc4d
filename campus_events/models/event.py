"""Event model definitions."""

import enum

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from campus_events.database import Base
from campus_events.models.admin import Admin


class EventStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class Event(Base):
    """An event owned by exactly one administrator."""
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("max_participants > 0", name="check_max_participants_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    event_type = Column(String, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    location = Column(String, nullable=False)
    max_participants = Column(Integer, nullable=False)
    registration_deadline = Column(DateTime, nullable=False)
    requirements = Column(Text)
    prizes = Column(Text)
    contact_info = Column(String)
    image_url = Column(String)
    created_by = Column(Integer, ForeignKey("admins.id"), nullable=False)
    status = Column(
        Enum(EventStatus, native_enum=False, values_callable=lambda statuses: [s.value for s in statuses]),
        nullable=False,
        default=EventStatus.ACTIVE,
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owner = relationship(Admin)

    @property
    def is_active(self) -> bool:
        return self.status == EventStatus.ACTIVE
