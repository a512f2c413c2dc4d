from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import HTTPException

from campus_events.auth import jwt_handler
from campus_events.auth.dependencies import Principal, require_admin, require_student, resolve_principal
from campus_events.auth.passwords import hash_password, verify_password
from campus_events.core import config


def test_hash_password_verifies_only_the_original_password() -> None:
    hashed = hash_password('correct horse')

    assert hashed != 'correct horse'
    assert verify_password('correct horse', hashed)
    assert not verify_password('wrong horse', hashed)


def test_verify_password_rejects_non_bcrypt_hash() -> None:
    assert not verify_password('anything', 'plain-text')
    assert not verify_password('anything', '')


def test_access_token_round_trips_subject_and_role() -> None:
    token = jwt_handler.create_access_token(subject='42', role='student')

    payload = jwt_handler.decode_access_token(token)

    assert payload['sub'] == '42'
    assert payload['role'] == 'student'


def test_resolve_principal_returns_identity_and_role() -> None:
    token = jwt_handler.create_access_token(subject='7', role='admin')

    assert resolve_principal(token) == Principal(id=7, role='admin')


def test_resolve_principal_rejects_expired_token() -> None:
    issued_at = datetime.now(timezone.utc) - timedelta(hours=2)
    token = jwt.encode(
        {'sub': '7', 'role': 'admin', 'iat': issued_at, 'exp': issued_at + timedelta(hours=1)},
        config.JWT_SECRET_KEY,
        algorithm=config.JWT_ALGORITHM,
    )

    with pytest.raises(HTTPException) as exception_info:
        resolve_principal(token)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid token'


def test_resolve_principal_rejects_foreign_signature() -> None:
    token = jwt.encode({'sub': '7', 'role': 'admin'}, 'another-secret', algorithm='HS256')

    with pytest.raises(HTTPException) as exception_info:
        resolve_principal(token)

    assert exception_info.value.status_code == 401


def test_resolve_principal_rejects_unknown_role() -> None:
    token = jwt_handler.create_access_token(subject='7', role='superuser')

    with pytest.raises(HTTPException) as exception_info:
        resolve_principal(token)

    assert exception_info.value.detail == 'Invalid token role'


def test_role_guards_reject_the_other_role() -> None:
    with pytest.raises(HTTPException) as admin_info:
        require_admin(Principal(id=1, role='student'))
    with pytest.raises(HTTPException) as student_info:
        require_student(Principal(id=1, role='admin'))

    assert admin_info.value.status_code == 403
    assert admin_info.value.detail == 'Access denied. Admin role required.'
    assert student_info.value.status_code == 403
    assert student_info.value.detail == 'Access denied. Student role required.'
