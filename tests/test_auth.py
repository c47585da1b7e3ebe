import uuid
from datetime import datetime, timezone

import pytest
from fastapi import HTTPException

from app.core.auth import is_admin, resolve_principal
from app.models.enums import Role
from app.schemas.profile import ProfileRead

from conftest import make_token


def profile_with(role):
    now = datetime.now(timezone.utc)
    return ProfileRead(
        id=uuid.uuid4(),
        email="x@example.com",
        role=role,
        created_at=now,
        updated_at=now,
    )


def test_is_admin_derivation():
    assert is_admin(profile_with(Role.ADMIN)) is True
    assert is_admin(profile_with(Role.CUSTOMER)) is False
    assert is_admin(None) is False


def test_resolve_principal_from_valid_token():
    user_id = uuid.uuid4()
    token = make_token(user_id, "doc@clinic.example", {"full_name": "Doc"})

    principal = resolve_principal(token)

    assert principal.id == user_id
    assert principal.email == "doc@clinic.example"
    assert principal.display_name == "Doc"


def test_expired_token_rejected():
    token = make_token(uuid.uuid4(), "doc@clinic.example", expires_in=-60)

    with pytest.raises(HTTPException) as exc_info:
        resolve_principal(token)

    assert exc_info.value.status_code == 401


def test_token_with_non_uuid_sub_rejected():
    token = make_token("not-a-uuid", "doc@clinic.example")

    with pytest.raises(HTTPException) as exc_info:
        resolve_principal(token)

    assert exc_info.value.detail == "Invalid sub in token"


def test_garbage_token_rejected():
    with pytest.raises(HTTPException) as exc_info:
        resolve_principal("definitely.not.a-jwt")

    assert exc_info.value.status_code == 401
