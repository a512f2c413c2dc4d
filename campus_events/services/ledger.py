"""Registration ledger: the register / check-in / cancel state machine.

A (event, student) pair is either absent, ``registered`` or ``checked_in``.
``registered`` may move to ``checked_in`` (once, irreversibly) or back to
absent through cancellation. ``checked_in`` is terminal.

Every failure is raised as a :class:`LedgerError` subclass carrying a stable
``reason`` code, so the HTTP layer can report it without string matching.
"""

import logging
from datetime import datetime, timedelta, timezone
from threading import Lock
from weakref import WeakValueDictionary

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from campus_events.core import config
from campus_events.models.event import Event
from campus_events.models.registration import (
    SEAT_HOLDING_STATUSES,
    EventRegistration,
    RegistrationStatus,
)

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    reason = 'ledger_error'
    message = 'Registration request failed.'
    status_code = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class EventNotAvailable(LedgerError):
    reason = 'event_not_available'
    message = 'Event not found or not active'
    status_code = 404


class RegistrationDeadlinePassed(LedgerError):
    reason = 'deadline_passed'
    message = 'Registration deadline has passed'


class AlreadyRegistered(LedgerError):
    reason = 'already_registered'
    message = 'Already registered for this event'
    status_code = 409


class EventFull(LedgerError):
    reason = 'event_full'
    message = 'Event is full'
    status_code = 409


class NotRegistered(LedgerError):
    reason = 'not_registered'
    message = 'Not registered for this event'
    status_code = 404


class AlreadyCheckedIn(LedgerError):
    reason = 'already_checked_in'
    message = 'Already checked in'


class CheckInNotOpen(LedgerError):
    reason = 'check_in_not_open'
    message = 'Check-in not available yet. Check-in opens 30 minutes before event starts.'


class RegistrationNotFound(LedgerError):
    reason = 'registration_not_found'
    message = 'Registration not found'
    status_code = 404


class CancelAfterCheckIn(LedgerError):
    reason = 'cancel_after_check_in'
    message = 'Cannot cancel after check-in'


# Entries live only while some caller holds the lock object.
_event_locks: WeakValueDictionary = WeakValueDictionary()
_event_locks_guard = Lock()


def _event_lock(event_id: int) -> Lock:
    with _event_locks_guard:
        lock = _event_locks.get(event_id)
        if lock is None:
            lock = Lock()
            _event_locks[event_id] = lock
        return lock


def current_time() -> datetime:
    """Naive UTC timestamp, matching how event times are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def check_in_opens_at(event: Event) -> datetime:
    return event.start_date - timedelta(minutes=config.CHECK_IN_OPENS_MINUTES)


def active_count(db: Session, event_id: int) -> int:
    return db.query(func.count(EventRegistration.id)).filter(
        EventRegistration.event_id == event_id,
        EventRegistration.status.in_(SEAT_HOLDING_STATUSES),
    ).scalar() or 0


def find_registration(db: Session, event_id: int, student_id: int) -> EventRegistration | None:
    return db.query(EventRegistration).filter(
        EventRegistration.event_id == event_id,
        EventRegistration.student_id == student_id,
    ).first()


def register(db: Session, event_id: int, student_id: int, now: datetime) -> EventRegistration:
    # Registrations for one event are serialised in-process, and the event row
    # is locked for backends that support SELECT ... FOR UPDATE. The capacity
    # is counted again after the insert so an over-booking never commits.
    with _event_lock(event_id):
        try:
            event = db.query(Event).filter(Event.id == event_id).with_for_update().first()
            if event is None or not event.is_active:
                raise EventNotAvailable()

            if now > event.registration_deadline:
                raise RegistrationDeadlinePassed()

            if find_registration(db, event_id, student_id) is not None:
                raise AlreadyRegistered()

            if active_count(db, event_id) >= event.max_participants:
                raise EventFull()

            registration = EventRegistration(
                event_id=event_id,
                student_id=student_id,
                registration_date=now,
                status=RegistrationStatus.REGISTERED,
            )
            db.add(registration)
            db.flush()

            if active_count(db, event_id) > event.max_participants:
                raise EventFull()

            db.commit()
        except LedgerError as exc:
            db.rollback()
            logger.info('Registration rejected for event %s student %s: %s', event_id, student_id, exc.reason)
            raise
        except IntegrityError as exc:
            db.rollback()
            logger.info('Duplicate registration for event %s student %s', event_id, student_id)
            raise AlreadyRegistered() from exc

    db.refresh(registration)
    logger.info('Student %s registered for event %s', student_id, event_id)
    return registration


def _while_registered(db: Session, registration_id: int):
    # Matches the row only while it is still registered. A row that changed
    # state after it was read is left untouched and reports zero affected rows.
    # Callers hold the event lock around the write, since SQLite has no row locks.
    return db.query(EventRegistration).filter(
        EventRegistration.id == registration_id,
        EventRegistration.status == RegistrationStatus.REGISTERED,
    )


def check_in(db: Session, event_id: int, student_id: int, now: datetime) -> EventRegistration:
    try:
        registration = find_registration(db, event_id, student_id)
        if registration is None:
            raise NotRegistered()

        if registration.status == RegistrationStatus.CHECKED_IN:
            raise AlreadyCheckedIn()

        if now < check_in_opens_at(registration.event):
            raise CheckInNotOpen(
                f'Check-in not available yet. Check-in opens {config.CHECK_IN_OPENS_MINUTES} '
                'minutes before event starts.'
            )

        with _event_lock(event_id):
            updated = _while_registered(db, registration.id).update(
                {
                    EventRegistration.status: RegistrationStatus.CHECKED_IN,
                    EventRegistration.check_in_time: now,
                },
                synchronize_session=False,
            )
            if updated == 0:
                db.rollback()
                if find_registration(db, event_id, student_id) is None:
                    raise NotRegistered()
                raise AlreadyCheckedIn()

            db.commit()
    except LedgerError as exc:
        db.rollback()
        logger.info('Check-in rejected for event %s student %s: %s', event_id, student_id, exc.reason)
        raise

    db.refresh(registration)
    logger.info('Student %s checked in to event %s', student_id, event_id)
    return registration


def cancel(db: Session, event_id: int, student_id: int) -> None:
    try:
        registration = find_registration(db, event_id, student_id)
        if registration is None:
            raise RegistrationNotFound()

        if registration.status == RegistrationStatus.CHECKED_IN:
            raise CancelAfterCheckIn()

        with _event_lock(event_id):
            deleted = _while_registered(db, registration.id).delete(synchronize_session=False)
            if deleted == 0:
                db.rollback()
                if find_registration(db, event_id, student_id) is None:
                    raise RegistrationNotFound()
                raise CancelAfterCheckIn()

            db.commit()
    except LedgerError as exc:
        db.rollback()
        logger.info('Cancellation rejected for event %s student %s: %s', event_id, student_id, exc.reason)
        raise

    logger.info('Student %s cancelled registration for event %s', student_id, event_id)


def list_for_event(db: Session, event_id: int) -> list[EventRegistration]:
    return db.query(EventRegistration).options(
        joinedload(EventRegistration.student),
    ).filter(
        EventRegistration.event_id == event_id,
    ).order_by(EventRegistration.registration_date.asc(), EventRegistration.id.asc()).all()


def list_for_student(db: Session, student_id: int) -> list[EventRegistration]:
    return db.query(EventRegistration).options(
        joinedload(EventRegistration.event).joinedload(Event.owner),
    ).filter(
        EventRegistration.student_id == student_id,
    ).order_by(EventRegistration.registration_date.desc(), EventRegistration.id.desc()).all()
