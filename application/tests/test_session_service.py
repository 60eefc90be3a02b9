from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from supplier_auth.core.errors import InvalidToken, Revoked, TokenExpired, Unauthenticated, UserNotFound

from conftest import last_code

PHONE = "+6281234567890"


async def login(components, notifier, phone=PHONE, device=None) -> str:
    await components.otp_service.request_code(phone)
    result = await components.otp_service.verify_code(phone, last_code(notifier), device)
    return result.token


@pytest.mark.asyncio
async def test_authenticate_returns_user(components, notifier):
    token = await login(components, notifier)
    user = components.session_service.authenticate(token)
    assert user.phone == PHONE


def test_missing_token_is_unauthenticated(components):
    with pytest.raises(Unauthenticated) as exc:
        components.session_service.authenticate(None)
    assert exc.value.message == "No token provided"
    with pytest.raises(Unauthenticated):
        components.session_service.authenticate("")


def test_garbage_token_is_invalid(components):
    with pytest.raises(InvalidToken):
        components.session_service.authenticate("not.a.jwt")


@pytest.mark.asyncio
async def test_token_expires_on_service_clock(components, notifier, clock):
    token = await login(components, notifier)
    clock.advance(days=7)
    with pytest.raises(TokenExpired) as exc:
        components.session_service.authenticate(token)
    assert exc.value.message == "Token expired"


@pytest.mark.asyncio
async def test_deleted_user_is_not_found(components, clock):
    token = components.tokens.issue("no-such-user", clock())
    with pytest.raises(UserNotFound):
        components.session_service.authenticate(token)


@pytest.mark.asyncio
async def test_second_login_revokes_first_token(components, notifier, clock):
    first = await login(components, notifier)
    clock.advance(seconds=120)
    second = await login(components, notifier)

    with pytest.raises(Revoked) as exc:
        components.session_service.authenticate(first)
    assert exc.value.message == "Token revoked"
    assert components.session_service.authenticate(second).phone == PHONE


@pytest.mark.asyncio
async def test_logins_within_grace_keep_both_tokens(components, notifier, clock):
    first = await login(components, notifier)
    clock.advance(seconds=30)
    await login(components, notifier)

    assert components.session_service.authenticate(first).phone == PHONE


@pytest.mark.asyncio
async def test_grace_is_configurable(components, notifier, clock):
    components.session_service.revocation_grace = timedelta(seconds=5)
    first = await login(components, notifier)
    clock.advance(seconds=30)
    await login(components, notifier)

    with pytest.raises(Revoked):
        components.session_service.authenticate(first)


@pytest.mark.asyncio
async def test_logout_blacklists_and_advances_watermark(components, notifier, clock):
    presented = await login(components, notifier)
    user = components.users.get_by_phone(PHONE)

    clock.advance(seconds=10)
    other = components.tokens.issue(user.id, clock())

    clock.advance(seconds=120)
    components.session_service.logout(presented)

    assert components.blacklist.contains(presented)
    assert not components.blacklist.contains(other)
    with pytest.raises(Revoked):
        components.session_service.authenticate(presented)
    with pytest.raises(Revoked):
        components.session_service.authenticate(other)

    clock.advance(seconds=1)
    after = components.tokens.issue(user.id, clock())
    assert components.session_service.authenticate(after).id == user.id


@pytest.mark.asyncio
async def test_logout_revokes_presented_token_inside_grace(components, notifier):
    token = await login(components, notifier)
    components.session_service.logout(token)
    with pytest.raises(Revoked):
        components.session_service.authenticate(token)


@pytest.mark.asyncio
async def test_logout_with_expired_token_still_advances_watermark(components, notifier, clock):
    token = await login(components, notifier)
    clock.advance(days=8)
    components.session_service.logout(token)

    user = components.users.get_by_phone(PHONE)
    assert user.last_token_issued.replace(tzinfo=None) == clock().replace(tzinfo=None)


def test_logout_never_fails(components):
    components.session_service.logout(None)
    components.session_service.logout("garbage")
    assert components.blacklist.contains("garbage")


@pytest.mark.asyncio
async def test_logout_survives_a_database_failure(components, notifier, monkeypatch):
    token = await login(components, notifier)

    def broken(user_id, now):
        raise OperationalError("UPDATE users", {}, Exception("db down"))

    monkeypatch.setattr(components.users, "advance_watermark", broken)
    components.session_service.logout(token)

    assert components.blacklist.contains(token)
    with pytest.raises(Revoked):
        components.session_service.authenticate(token)


@pytest.mark.asyncio
async def test_optional_variant_returns_none_on_failure(components, notifier, clock):
    assert components.session_service.authenticate_optional(None) is None
    assert components.session_service.authenticate_optional("garbage") is None

    token = await login(components, notifier)
    assert components.session_service.authenticate_optional(token).phone == PHONE

    clock.advance(days=8)
    assert components.session_service.authenticate_optional(token) is None
