import threading

import pytest

from supplier_auth.config.settings import AuthConfigs
from supplier_auth.core.container import build_components
from supplier_auth.core.errors import Expired, InvalidCredential, InvalidInput
from supplier_auth.utils.datetime_helpers import as_utc

from conftest import FakeNotifier, last_code

PHONE = "+62 812-3456-7890"
CANONICAL = "+6281234567890"


@pytest.mark.asyncio
async def test_request_code_creates_user_and_sends_template(components, notifier):
    result = await components.otp_service.request_code(PHONE)

    assert result.phone == CANONICAL
    assert result.expires_in_seconds == 600
    assert result.code is not None and len(result.code) == 6

    user = components.users.get_by_phone(CANONICAL)
    assert user is not None
    assert user.is_verified is False

    destination, message = notifier.sent[-1]
    assert destination == CANONICAL
    assert message == (
        f"Your supplier portal verification code is {result.code}. "
        "It expires in 10 minutes. Do not share this code with anyone."
    )


@pytest.mark.asyncio
async def test_request_code_rejects_short_or_missing_phone(components):
    with pytest.raises(InvalidInput) as exc:
        await components.otp_service.request_code("12345")
    assert exc.value.message == "Valid phone number is required"

    with pytest.raises(InvalidInput):
        await components.otp_service.request_code(None)


@pytest.mark.asyncio
async def test_code_hidden_outside_debug(components):
    components.otp_service.expose_code = False
    result = await components.otp_service.request_code(PHONE)
    assert result.code is None


def test_code_hidden_when_debug_is_unset(monkeypatch, session_factory):
    monkeypatch.delenv("DEBUG", raising=False)
    configs = AuthConfigs()
    assert configs.DEBUG is False

    components = build_components(configs, session_factory=session_factory, notifier=FakeNotifier())
    assert components.otp_service.expose_code is False


@pytest.mark.asyncio
async def test_store_calls_run_off_the_event_loop_thread(components, notifier, monkeypatch):
    loop_thread = threading.get_ident()
    seen = []

    def tracking(method):
        def wrapper(*args, **kwargs):
            seen.append(threading.get_ident())
            return method(*args, **kwargs)
        return wrapper

    for repository, name in [(components.users, "get_or_create_by_phone"), (components.otps, "upsert"),
                             (components.otps, "find"), (components.otps, "consume"),
                             (components.users, "mark_login")]:
        monkeypatch.setattr(repository, name, tracking(getattr(repository, name)))

    await components.otp_service.request_code(PHONE)
    await components.otp_service.verify_code(PHONE, last_code(notifier))

    assert len(seen) == 5
    assert loop_thread not in seen


@pytest.mark.asyncio
async def test_delivery_failure_is_swallowed(components):
    components.otp_service.notifier = FakeNotifier(ok=False)
    result = await components.otp_service.request_code(PHONE)
    assert result.phone == CANONICAL

    components.otp_service.notifier = FakeNotifier(raises=True)
    result = await components.otp_service.request_code(PHONE)
    assert result.phone == CANONICAL
    assert components.users.get_by_phone(CANONICAL) is not None


@pytest.mark.asyncio
async def test_second_request_invalidates_first_code(components, notifier, monkeypatch):
    codes = iter(["111111", "222222"])
    monkeypatch.setattr(components.otp_service, "generate_otp", lambda: next(codes))

    await components.otp_service.request_code(PHONE)
    await components.otp_service.request_code(PHONE)

    with pytest.raises(InvalidCredential):
        await components.otp_service.verify_code(PHONE, "111111")

    result = await components.otp_service.verify_code(PHONE, "222222")
    assert result.token


@pytest.mark.asyncio
async def test_code_can_only_be_consumed_once(components, notifier):
    await components.otp_service.request_code(PHONE)
    code = last_code(notifier)

    await components.otp_service.verify_code(PHONE, code)
    with pytest.raises(InvalidCredential) as exc:
        await components.otp_service.verify_code(PHONE, code)
    assert exc.value.message == "Invalid OTP"


@pytest.mark.asyncio
async def test_code_expires_after_ten_minutes(components, notifier, clock):
    await components.otp_service.request_code(PHONE)
    code = last_code(notifier)

    clock.advance(minutes=10, seconds=1)
    with pytest.raises(Expired):
        await components.otp_service.verify_code(PHONE, code)

    # the expired record is gone
    with pytest.raises(InvalidCredential):
        await components.otp_service.verify_code(PHONE, code)


@pytest.mark.asyncio
async def test_code_still_valid_just_before_expiry(components, notifier, clock):
    await components.otp_service.request_code(PHONE)
    code = last_code(notifier)

    clock.advance(minutes=9, seconds=59)
    result = await components.otp_service.verify_code(PHONE, code)
    assert result.token


@pytest.mark.asyncio
async def test_verify_marks_user_and_sets_watermark_to_token_iat(components, notifier, clock):
    await components.otp_service.request_code(PHONE)
    result = await components.otp_service.verify_code(PHONE, last_code(notifier), "Pixel 8 / Android 15")

    user = components.users.get_by_phone(CANONICAL)
    assert user.is_verified is True
    assert user.device_info == "Pixel 8 / Android 15"
    assert as_utc(user.last_login) == clock()
    assert as_utc(user.last_token_issued) == clock()

    claims = components.tokens.decode(result.token, clock())
    assert claims.user_id == user.id
    assert claims.issued_at == clock()
    assert claims.device == "Pixel 8 / Android 15"

    view = result.user.model_dump(by_alias=True)
    assert view == {
        "id": user.id,
        "phone": CANONICAL,
        "email": None,
        "companyName": "",
        "profileCompleted": False,
        "hasSupplierData": False,
        "supplierId": None,
    }


@pytest.mark.asyncio
async def test_verify_input_checks(components):
    with pytest.raises(InvalidInput) as exc:
        await components.otp_service.verify_code(PHONE, "12345")
    assert exc.value.message == "Valid 6-digit OTP is required"

    with pytest.raises(InvalidInput) as exc:
        await components.otp_service.verify_code(None, "123456")
    assert exc.value.message == "Phone number is required"


@pytest.mark.asyncio
async def test_unknown_phone_does_not_leak_existence(components):
    with pytest.raises(InvalidCredential) as exc:
        await components.otp_service.verify_code("+15550001111", "123456")
    assert exc.value.message == "Invalid OTP"


def test_get_or_create_by_phone_is_idempotent(components):
    first = components.users.get_or_create_by_phone(CANONICAL)
    second = components.users.get_or_create_by_phone(CANONICAL)
    assert first.id == second.id


def test_get_or_create_recovers_from_unique_conflict(components, monkeypatch):
    existing = components.users.get_or_create_by_phone(CANONICAL)

    # simulate losing the race: the pre-check misses, the insert collides
    original = components.users.get_by_phone
    calls = {"n": 0}

    def racing_get_by_phone(phone):
        calls["n"] += 1
        return None if calls["n"] == 1 else original(phone)

    monkeypatch.setattr(components.users, "get_by_phone", racing_get_by_phone)
    user = components.users.get_or_create_by_phone(CANONICAL)
    assert user.id == existing.id
