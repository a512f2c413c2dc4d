"""Create an administrator account from the command line.

Usage:
    python -m campus_events.create_admin EMAIL PASSWORD NAME COLLEGE
"""
import argparse
import logging
import sys

from sqlalchemy.orm import Session

from campus_events.auth.passwords import hash_password
from campus_events.core import config
from campus_events.database import Base, SessionLocal, engine
from campus_events.models.admin import Admin

logger = logging.getLogger(__name__)


def create_admin(db: Session, email: str, password: str, name: str, college: str) -> Admin | None:
    """Insert an admin unless one already uses ``email``; returns the new row or None."""
    normalized_email = email.strip().lower()
    if db.query(Admin).filter(Admin.email == normalized_email).first():
        return None

    admin = Admin(
        email=normalized_email,
        hashed_password=hash_password(password),
        name=name.strip(),
        college=college.strip(),
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def seed_default_admin(db: Session) -> Admin | None:
    if not config.SEED_DEFAULT_ADMIN or db.query(Admin).count() > 0:
        return None

    admin = create_admin(
        db,
        email=config.DEFAULT_ADMIN_EMAIL,
        password=config.DEFAULT_ADMIN_PASSWORD,
        name=config.DEFAULT_ADMIN_NAME,
        college=config.DEFAULT_ADMIN_COLLEGE,
    )
    if admin is not None:
        logger.warning('Default admin created: %s. Change its password.', admin.email)
    return admin


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description='Create an administrator account.')
    parser.add_argument('email')
    parser.add_argument('password')
    parser.add_argument('name')
    parser.add_argument('college')
    args = parser.parse_args(argv)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        admin = create_admin(db, args.email, args.password, args.name, args.college)
    finally:
        db.close()

    if admin is None:
        print(f'Admin already exists: {args.email}', file=sys.stderr)
        sys.exit(1)
    print(f'Admin created: {admin.email} (id {admin.id})')


if __name__ == '__main__':
    main()
