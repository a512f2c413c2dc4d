from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from campus_events.core import config


def build_engine(database_url: str):
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


engine = build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_schema_checked = False

INDEX_STATEMENTS = {
    'events': [
        'CREATE INDEX IF NOT EXISTS idx_events_created_by ON events(created_by)',
        'CREATE INDEX IF NOT EXISTS idx_events_status ON events(status)',
        'CREATE INDEX IF NOT EXISTS idx_events_start_date ON events(start_date)',
    ],
    'event_registrations': [
        'CREATE INDEX IF NOT EXISTS idx_event_registrations_event_id ON event_registrations(event_id)',
        'CREATE INDEX IF NOT EXISTS idx_event_registrations_student_id ON event_registrations(student_id)',
        'CREATE INDEX IF NOT EXISTS idx_event_registrations_status ON event_registrations(status)',
    ],
}


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_schema() -> None:
    global _schema_checked

    if _schema_checked:
        return

    with _schema_lock:
        if _schema_checked:
            return

        existing_tables = set(inspect(engine).get_table_names())

        with engine.begin() as connection:
            for table_name, statements in INDEX_STATEMENTS.items():
                if table_name not in existing_tables:
                    continue
                for statement in statements:
                    connection.execute(text(statement))

        _schema_checked = True
