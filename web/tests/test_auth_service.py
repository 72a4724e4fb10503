from datetime import datetime, timedelta

import pytest

from realty.core.exceptions import (
    AuthenticationError, AuthorizationError, ConflictError, ValidationError,
)
from realty.security import ACCESS, REFRESH, create_token, decode_token, verify_password
from realty.services.auth_service import AuthService

PASSWORD = "password123"


@pytest.mark.asyncio
async def test_register_normalises_email(uow):
    user = await AuthService(uow).register("New.User@Realty.IO", "s3cret-pass", "New", "User", role="seller")
    assert user.email == "new.user@realty.io"
    assert user.role == "seller"
    assert user.agent_verification_status == "none"
    assert verify_password("s3cret-pass", user.password_hash)


@pytest.mark.asyncio
async def test_register_duplicate_email(uow, make_user):
    user = await make_user()
    with pytest.raises(ConflictError):
        await AuthService(uow).register(user.email.upper(), "s3cret-pass", "Dup", "User")


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["manager", "admin"])
async def test_register_rejects_staff_roles(uow, role):
    with pytest.raises(ValidationError):
        await AuthService(uow).register("staff@realty.io", "s3cret-pass", "Staff", "User", role=role)


@pytest.mark.asyncio
async def test_login_issues_typed_tokens(uow, make_user):
    user = await make_user(role="seller")
    logged_in, access, refresh = await AuthService(uow).authenticate_user(user.email, PASSWORD)

    assert logged_in.last_login is not None
    assert decode_token(access)["sub"] == str(user.id)
    assert decode_token(refresh, expected_type=REFRESH)["type"] == REFRESH
    with pytest.raises(AuthenticationError):
        decode_token(refresh, expected_type=ACCESS)


@pytest.mark.asyncio
async def test_login_wrong_password(uow, make_user):
    user = await make_user()
    email = user.email
    with pytest.raises(AuthenticationError):
        await AuthService(uow).authenticate_user(email, "wrong-password")
    with pytest.raises(AuthenticationError):
        await AuthService(uow).authenticate_user("nobody@realty.io", PASSWORD)


@pytest.mark.asyncio
async def test_login_inactive_account(uow, make_user):
    user = await make_user(is_active=False)
    with pytest.raises(AuthorizationError):
        await AuthService(uow).authenticate_user(user.email, PASSWORD)


@pytest.mark.asyncio
async def test_refresh_requires_refresh_token(uow, make_user):
    user = await make_user()
    service = AuthService(uow)

    access = await service.refresh_access_token(create_token(user.id, user.role, token_type=REFRESH))
    assert decode_token(access)["type"] == ACCESS

    with pytest.raises(AuthenticationError):
        await service.refresh_access_token(create_token(user.id, user.role, token_type=ACCESS))
    with pytest.raises(AuthenticationError):
        await service.refresh_access_token("garbage")


@pytest.mark.asyncio
async def test_change_password(uow, make_user, actor):
    user = await make_user()
    snapshot = actor(user)
    service = AuthService(uow)

    with pytest.raises(AuthenticationError):
        await service.change_password(snapshot, snapshot.id, "not-it", "new-password-1")

    updated = await service.change_password(snapshot, snapshot.id, PASSWORD, "new-password-1")
    assert verify_password("new-password-1", updated.password_hash)


@pytest.mark.asyncio
async def test_admin_cannot_change_someone_elses_password(uow, make_user, actor):
    admin = await make_user(role="admin")
    user = await make_user()
    with pytest.raises(AuthorizationError):
        await AuthService(uow).change_password(actor(admin), user.id, PASSWORD, "new-password-1")


@pytest.mark.asyncio
async def test_forgot_and_reset_password(uow, make_user):
    user = await make_user()
    service = AuthService(uow)

    token = await service.forgot_password(user.email)
    assert token and user.password_reset_token != token

    await service.reset_password(token, "brand-new-pass")
    assert verify_password("brand-new-pass", user.password_hash)
    assert user.password_reset_token is None

    with pytest.raises(ValidationError):
        await service.reset_password(token, "again-new-pass")


@pytest.mark.asyncio
async def test_forgot_password_unknown_email(uow):
    assert await AuthService(uow).forgot_password("ghost@realty.io") is None


@pytest.mark.asyncio
async def test_expired_reset_token(uow, session, make_user):
    user = await make_user()
    service = AuthService(uow)
    token = await service.forgot_password(user.email)
    user.password_reset_expires = datetime.utcnow() - timedelta(minutes=1)
    await session.commit()

    with pytest.raises(ValidationError):
        await service.reset_password(token, "brand-new-pass")
