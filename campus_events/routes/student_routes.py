import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_events.auth.dependencies import Principal, require_student
from campus_events.database import get_db
from campus_events.models.student import Student
from campus_events.routes.errors import database_unavailable, ledger_error
from campus_events.schemas import RegistrationResponse, RegistrationWithEvent, StudentProfile
from campus_events.services import ledger

router = APIRouter(tags=['students'])

logger = logging.getLogger(__name__)


class EventReferenceRequest(BaseModel):
    event_id: int = Field(alias='eventId')

    class Config:
        populate_by_name = True


class UpdateProfileRequest(BaseModel):
    name: str | None = None
    phone: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name must not be blank.')
        return normalized

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class MyRegistrationsResponse(BaseModel):
    registrations: list[RegistrationWithEvent]


def get_student(student_id: int, db: Session) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Student not found')
    return student


@router.post('/register-event', status_code=status.HTTP_201_CREATED)
def register_for_event(
    data: EventReferenceRequest,
    principal: Principal = Depends(require_student),
    db: Session = Depends(get_db),
):
    try:
        registration = ledger.register(db, data.event_id, principal.id, now=ledger.current_time())
    except ledger.LedgerError as exc:
        raise ledger_error(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    return {
        'message': 'Successfully registered for event',
        'registration': RegistrationResponse.model_validate(registration),
    }


@router.post('/check-in')
def check_in_to_event(
    data: EventReferenceRequest,
    principal: Principal = Depends(require_student),
    db: Session = Depends(get_db),
):
    try:
        registration = ledger.check_in(db, data.event_id, principal.id, now=ledger.current_time())
    except ledger.LedgerError as exc:
        raise ledger_error(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    return {
        'message': 'Successfully checked in',
        'registration': RegistrationResponse.model_validate(registration),
    }


@router.delete('/cancel-registration/{event_id}')
def cancel_registration(
    event_id: int,
    principal: Principal = Depends(require_student),
    db: Session = Depends(get_db),
):
    try:
        ledger.cancel(db, event_id, principal.id)
    except ledger.LedgerError as exc:
        raise ledger_error(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    return {'message': 'Registration cancelled successfully'}


@router.get('/my-events', response_model=MyRegistrationsResponse)
def list_my_registrations(principal: Principal = Depends(require_student), db: Session = Depends(get_db)):
    try:
        registrations = ledger.list_for_student(db, principal.id)
        return MyRegistrationsResponse(
            registrations=[RegistrationWithEvent.model_validate(registration) for registration in registrations],
        )
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/profile')
def get_profile(principal: Principal = Depends(require_student), db: Session = Depends(get_db)):
    try:
        student = get_student(principal.id, db)
        return {'student': StudentProfile.model_validate(student)}
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.put('/profile')
def update_profile(
    data: UpdateProfileRequest,
    principal: Principal = Depends(require_student),
    db: Session = Depends(get_db),
):
    try:
        student = get_student(principal.id, db)
        for field_name, value in data.model_dump(exclude_unset=True).items():
            if field_name == 'name' and value is None:
                continue
            setattr(student, field_name, value)

        db.commit()
        db.refresh(student)

        return {
            'message': 'Profile updated successfully',
            'student': StudentProfile.model_validate(student),
        }
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
