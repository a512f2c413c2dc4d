"""Response models shared by the route modules."""

from datetime import datetime

from pydantic import BaseModel, Field

from campus_events.models.event import EventStatus
from campus_events.models.registration import RegistrationStatus


class AdminSummary(BaseModel):
    name: str | None = None
    college: str | None = None

    class Config:
        from_attributes = True


class AdminProfile(BaseModel):
    id: int
    email: str
    name: str
    college: str

    class Config:
        from_attributes = True


class StudentSummary(BaseModel):
    name: str | None = None
    student_id: str | None = Field(default=None, validation_alias='student_number')
    college: str | None = None

    class Config:
        from_attributes = True
        populate_by_name = True


class StudentProfile(BaseModel):
    id: int
    email: str
    name: str
    student_id: str = Field(validation_alias='student_number')
    college: str
    phone: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
        populate_by_name = True


class EventSummary(BaseModel):
    id: int
    title: str
    description: str | None = None
    event_type: str
    start_date: datetime
    end_date: datetime
    location: str
    image_url: str | None = None
    status: EventStatus
    admin: AdminSummary | None = Field(default=None, validation_alias='owner')

    class Config:
        from_attributes = True
        populate_by_name = True


class EventResponse(EventSummary):
    max_participants: int
    registration_deadline: datetime
    requirements: str | None = None
    prizes: str | None = None
    contact_info: str | None = None
    created_by: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RegistrationResponse(BaseModel):
    id: int
    event_id: int
    student_id: int
    registration_date: datetime
    check_in_time: datetime | None = None
    status: RegistrationStatus
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class RegistrationWithStudent(RegistrationResponse):
    student: StudentSummary | None = None


class RegistrationWithEvent(RegistrationResponse):
    event: EventSummary | None = None


class EventDetailResponse(EventResponse):
    registrations: list[RegistrationWithStudent] = []
