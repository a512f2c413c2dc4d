"""Event registration model definitions."""

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import relationship

from campus_events.database import Base
from campus_events.models.event import Event
from campus_events.models.student import Student


class RegistrationStatus(str, enum.Enum):
    REGISTERED = "registered"
    CHECKED_IN = "checked_in"


# Statuses that occupy a seat against the event capacity.
SEAT_HOLDING_STATUSES = (RegistrationStatus.REGISTERED, RegistrationStatus.CHECKED_IN)


class EventRegistration(Base):
    """Ties one student to one event."""
    __tablename__ = "event_registrations"
    __table_args__ = (
        UniqueConstraint("event_id", "student_id", name="uq_event_registrations_event_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    registration_date = Column(DateTime, nullable=False)
    check_in_time = Column(DateTime, nullable=True)
    status = Column(
        Enum(RegistrationStatus, native_enum=False, values_callable=lambda statuses: [s.value for s in statuses]),
        nullable=False,
        default=RegistrationStatus.REGISTERED,
    )
    created_at = Column(DateTime, server_default=func.now())

    event = relationship(Event)
    student = relationship(Student)
