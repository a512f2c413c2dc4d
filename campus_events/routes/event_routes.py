import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from campus_events.auth.dependencies import Principal, require_admin
from campus_events.database import get_db
from campus_events.models.event import Event, EventStatus
from campus_events.routes.errors import database_unavailable
from campus_events.schemas import EventDetailResponse, EventResponse, RegistrationWithStudent
from campus_events.services import ledger, reporting

router = APIRouter(tags=['events'])

logger = logging.getLogger(__name__)

EVENT_NOT_FOUND_OR_DENIED = 'Event not found or access denied'
REQUIRED_TEXT_FIELDS = ('title', 'event_type', 'location')
REQUIRED_FIELDS = REQUIRED_TEXT_FIELDS + ('start_date', 'end_date', 'max_participants', 'registration_deadline')


def to_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class EventFields(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator('start_date', 'end_date', 'registration_deadline', check_fields=False)
    @classmethod
    def normalize_datetime(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)

    @field_validator(*REQUIRED_TEXT_FIELDS, check_fields=False)
    @classmethod
    def validate_required_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            raise ValueError('Field must not be blank.')
        return normalized


class CreateEventRequest(EventFields):
    title: str
    description: str | None = None
    event_type: str
    start_date: datetime
    end_date: datetime
    location: str
    max_participants: int = Field(ge=1)
    registration_deadline: datetime
    requirements: str | None = None
    prizes: str | None = None
    contact_info: str | None = None
    image_url: str | None = None

    @model_validator(mode='after')
    def validate_schedule(self) -> 'CreateEventRequest':
        if self.end_date < self.start_date:
            raise ValueError('End date must not be before start date.')
        return self


class UpdateEventRequest(EventFields):
    title: str | None = None
    description: str | None = None
    event_type: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    location: str | None = None
    max_participants: int | None = Field(default=None, ge=1)
    registration_deadline: datetime | None = None
    requirements: str | None = None
    prizes: str | None = None
    contact_info: str | None = None
    image_url: str | None = None
    status: EventStatus | None = None


class EventListResponse(BaseModel):
    events: list[EventResponse]


class EventDetailEnvelope(BaseModel):
    event: EventDetailResponse


class MyEventsResponse(BaseModel):
    events: list[EventDetailResponse]


class EventStats(BaseModel):
    id: int
    title: str
    status: EventStatus
    maxParticipants: int
    currentRegistrations: int
    availableSpots: int
    fillRate: float


class EventStatsResponse(BaseModel):
    stats: list[EventStats]


def get_owned_event(event_id: int, admin_id: int, db: Session) -> Event:
    """Look up an event owned by ``admin_id``.

    A missing event and another admin's event are reported the same way so
    callers cannot probe for events they do not own.
    """
    event = db.query(Event).filter(
        Event.id == event_id,
        Event.created_by == admin_id,
    ).first()

    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=EVENT_NOT_FOUND_OR_DENIED)

    return event


def apply_event_patch(event: Event, patch: dict) -> None:
    for field_name in REQUIRED_FIELDS:
        if field_name in patch and patch[field_name] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f'{to_camel(field_name)} cannot be cleared.',
            )

    new_status = patch.pop('status', None)
    if new_status is not None and new_status != event.status:
        if new_status != EventStatus.CANCELLED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='Cancelled events cannot be reactivated.',
            )
        event.status = EventStatus.CANCELLED

    for field_name, value in patch.items():
        setattr(event, field_name, value)

    if event.end_date < event.start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='End date must not be before start date.',
        )


def build_event_detail(event: Event, db: Session) -> EventDetailResponse:
    registrations = [
        RegistrationWithStudent.model_validate(registration)
        for registration in ledger.list_for_event(db, event.id)
    ]
    return EventDetailResponse.model_validate(event).model_copy(update={'registrations': registrations})


@router.post('', status_code=status.HTTP_201_CREATED)
def create_event(
    data: CreateEventRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        event = Event(
            **data.model_dump(),
            created_by=principal.id,
            status=EventStatus.ACTIVE,
        )
        db.add(event)
        db.commit()
        db.refresh(event)

        logger.info('Admin %s created event %s', principal.id, event.id)
        return {
            'message': 'Event created successfully',
            'event': EventResponse.model_validate(event),
        }
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.get('', response_model=EventListResponse)
def list_events(db: Session = Depends(get_db)):
    try:
        events = db.query(Event).options(joinedload(Event.owner)).filter(
            Event.status == EventStatus.ACTIVE,
        ).order_by(Event.created_at.desc(), Event.id.desc()).all()

        return EventListResponse(events=[EventResponse.model_validate(event) for event in events])
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/admin/my-events', response_model=MyEventsResponse)
def list_my_events(principal: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        events = db.query(Event).options(joinedload(Event.owner)).filter(
            Event.created_by == principal.id,
        ).order_by(Event.created_at.desc(), Event.id.desc()).all()

        return MyEventsResponse(events=[build_event_detail(event, db) for event in events])
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/admin/stats', response_model=EventStatsResponse)
def get_event_stats(principal: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        return EventStatsResponse(stats=reporting.event_stats(db, principal.id))
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{event_id}', response_model=EventDetailEnvelope)
def get_event(event_id: int, db: Session = Depends(get_db)):
    try:
        event = db.query(Event).options(joinedload(Event.owner)).filter(Event.id == event_id).first()
        if event is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Event not found')

        return EventDetailEnvelope(event=build_event_detail(event, db))
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.put('/{event_id}')
def update_event(
    event_id: int,
    data: UpdateEventRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        event = get_owned_event(event_id, principal.id, db)
        try:
            apply_event_patch(event, data.model_dump(exclude_unset=True))
        except HTTPException:
            db.rollback()
            raise

        db.commit()
        db.refresh(event)

        logger.info('Admin %s updated event %s', principal.id, event.id)
        return {
            'message': 'Event updated successfully',
            'event': EventResponse.model_validate(event),
        }
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.delete('/{event_id}')
def cancel_event(
    event_id: int,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        event = get_owned_event(event_id, principal.id, db)
        event.status = EventStatus.CANCELLED
        db.commit()

        logger.info('Admin %s cancelled event %s', principal.id, event_id)
        return {'message': 'Event cancelled successfully'}
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
