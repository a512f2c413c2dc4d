import os
from datetime import datetime, timedelta

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('BCRYPT_ROUNDS', '4')
os.environ.setdefault('SEED_DEFAULT_ADMIN', 'false')

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from campus_events.auth import jwt_handler  # noqa: E402
from campus_events.auth.passwords import hash_password  # noqa: E402
from campus_events.database import Base  # noqa: E402
from campus_events.models.admin import Admin  # noqa: E402
from campus_events.models.event import Event, EventStatus  # noqa: E402
from campus_events.models.registration import EventRegistration, RegistrationStatus  # noqa: E402
from campus_events.models.student import Student  # noqa: E402

NOW = datetime(2026, 3, 2, 12, 0)


@pytest.fixture
def session_factory(tmp_path):
    # A file database so that sessions on different threads share state.
    engine = create_engine(
        f'sqlite:///{tmp_path / "campus_events_test.db"}',
        connect_args={'check_same_thread': False},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_admin(db):
    counter = {'value': 0}

    def _make_admin(email: str | None = None, password: str = 'secret123', name: str = 'Ada Admin') -> Admin:
        counter['value'] += 1
        admin = Admin(
            email=email or f'admin{counter["value"]}@college.edu',
            hashed_password=hash_password(password),
            name=name,
            college='North Campus',
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        return admin

    return _make_admin


@pytest.fixture
def make_student(db):
    counter = {'value': 0}

    def _make_student(email: str | None = None, password: str = 'secret123', name: str | None = None) -> Student:
        counter['value'] += 1
        student = Student(
            email=email or f'student{counter["value"]}@college.edu',
            hashed_password=hash_password(password),
            name=name or f'Student {counter["value"]}',
            student_number=f'S{counter["value"]:05d}',
            college='North Campus',
        )
        db.add(student)
        db.commit()
        db.refresh(student)
        return student

    return _make_student


@pytest.fixture
def make_event(db, make_admin):
    def _make_event(
        owner: Admin | None = None,
        max_participants: int = 10,
        start_date: datetime = NOW + timedelta(days=7),
        registration_deadline: datetime = NOW + timedelta(days=5),
        status: EventStatus = EventStatus.ACTIVE,
        title: str = 'Hackathon',
    ) -> Event:
        owner = owner or make_admin()
        event = Event(
            title=title,
            description='Build something in a weekend.',
            event_type='competition',
            start_date=start_date,
            end_date=start_date + timedelta(hours=3),
            location='Main Hall',
            max_participants=max_participants,
            registration_deadline=registration_deadline,
            created_by=owner.id,
            status=status,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make_event


@pytest.fixture
def make_registration(db):
    def _make_registration(
        event: Event,
        student: Student,
        status: RegistrationStatus = RegistrationStatus.REGISTERED,
    ) -> EventRegistration:
        registration = EventRegistration(
            event_id=event.id,
            student_id=student.id,
            registration_date=NOW,
            check_in_time=NOW if status == RegistrationStatus.CHECKED_IN else None,
            status=status,
        )
        db.add(registration)
        db.commit()
        db.refresh(registration)
        return registration

    return _make_registration


def auth_header(principal_id: int, role: str) -> dict:
    token = jwt_handler.create_access_token(subject=str(principal_id), role=role)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient

    from campus_events.database import get_db
    from campus_events.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
