"""Derived per-event statistics for an administrator's events."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from campus_events.models.event import Event
from campus_events.models.registration import EventRegistration


def fill_rate(current_registrations: int, max_participants: int) -> float:
    if max_participants <= 0:
        return 0.0
    return round(current_registrations / max_participants * 100, 1)


def event_stats(db: Session, admin_id: int) -> list[dict]:
    # Every ledger row counts, whatever its status.
    rows = db.query(
        Event.id,
        Event.title,
        Event.status,
        Event.max_participants,
        func.count(EventRegistration.id).label('current_registrations'),
    ).outerjoin(
        EventRegistration, EventRegistration.event_id == Event.id,
    ).filter(
        Event.created_by == admin_id,
    ).group_by(
        Event.id, Event.title, Event.status, Event.max_participants,
    ).order_by(Event.id.asc()).all()

    return [
        {
            'id': row.id,
            'title': row.title,
            'status': row.status.value,
            'maxParticipants': row.max_participants,
            'currentRegistrations': row.current_registrations,
            'availableSpots': row.max_participants - row.current_registrations,
            'fillRate': fill_rate(row.current_registrations, row.max_participants),
        }
        for row in rows
    ]
