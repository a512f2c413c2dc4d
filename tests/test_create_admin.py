import pytest

from campus_events import create_admin as create_admin_module
from campus_events.auth.passwords import verify_password
from campus_events.models.admin import Admin


def test_create_admin_normalizes_email_and_hashes_password(db) -> None:
    admin = create_admin_module.create_admin(db, ' Dean@College.EDU ', 'secret123', ' Dean ', 'Main')

    assert admin.email == 'dean@college.edu'
    assert admin.name == 'Dean'
    assert verify_password('secret123', admin.hashed_password)


def test_create_admin_skips_existing_email(db, make_admin) -> None:
    make_admin(email='dean@college.edu')

    assert create_admin_module.create_admin(db, 'dean@college.edu', 'secret123', 'Dean', 'Main') is None
    assert db.query(Admin).count() == 1


def test_seed_default_admin_only_runs_on_empty_table(db, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(create_admin_module.config, 'SEED_DEFAULT_ADMIN', True)

    seeded = create_admin_module.seed_default_admin(db)
    second = create_admin_module.seed_default_admin(db)

    assert seeded is not None
    assert seeded.email == create_admin_module.config.DEFAULT_ADMIN_EMAIL
    assert second is None
    assert db.query(Admin).count() == 1


def test_seed_default_admin_respects_flag(db, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(create_admin_module.config, 'SEED_DEFAULT_ADMIN', False)

    assert create_admin_module.seed_default_admin(db) is None
    assert db.query(Admin).count() == 0
