import asyncio
import threading
from datetime import timedelta

import pytest

from supplier_auth.connections.redis_wrapper import RedisJSONWrapper
from supplier_auth.services.token_blacklist import MemoryTokenBlacklist, RedisTokenBlacklist

from conftest import FakeRedis


@pytest.mark.parametrize("make_blacklist", [
    MemoryTokenBlacklist,
    lambda: RedisTokenBlacklist(RedisJSONWrapper(client=FakeRedis())),
])
def test_blacklist_membership(make_blacklist):
    blacklist = make_blacklist()
    blacklist.add("token-a")
    blacklist.add("token-a")

    assert blacklist.contains("token-a")
    assert not blacklist.contains("token-b")
    assert blacklist.size() == 1

    blacklist.clear()
    assert not blacklist.contains("token-a")
    assert blacklist.size() == 0


def test_redis_blacklist_never_stores_raw_tokens():
    fake = FakeRedis()
    RedisTokenBlacklist(RedisJSONWrapper(client=fake)).add("eyJ.secret.token")
    stored = fake.sets["auth:blacklist"]
    assert "eyJ.secret.token" not in stored
    assert all(len(member) == 64 for member in stored)


def test_run_once_deletes_expired_otps_only(components, clock):
    components.otps.upsert("+6281111111111", "a" * 64, clock() - timedelta(seconds=1), clock())
    components.otps.upsert("+6282222222222", "b" * 64, clock() + timedelta(minutes=5), clock())

    report = components.cleanup_task.run_once()

    assert report["expired_otps"] == 1
    assert components.otps.find("+6281111111111", "a" * 64) is None
    assert components.otps.find("+6282222222222", "b" * 64) is not None


def test_run_once_prunes_both_limiters(components, clock):
    components.otp_request_limiter.hit("10.0.0.1")
    components.otp_verify_limiter.hit("10.0.0.1")

    clock.advance(seconds=901)
    report = components.cleanup_task.run_once()
    assert report["emptied_windows"] == 2


def test_blacklist_cleared_only_past_bound(components):
    components.cleanup_task.blacklist_max_size = 2
    components.blacklist.add("t1")
    components.blacklist.add("t2")

    assert components.cleanup_task.run_once()["blacklist_cleared"] == 0
    assert components.blacklist.size() == 2

    components.blacklist.add("t3")
    assert components.cleanup_task.run_once()["blacklist_cleared"] == 3
    assert components.blacklist.size() == 0


def test_failing_step_does_not_stop_the_others(components, monkeypatch):
    def broken(now):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(components.otps, "delete_expired", broken)
    components.cleanup_task.blacklist_max_size = 0
    components.blacklist.add("t1")

    report = components.cleanup_task.run_once()

    assert report["expired_otps"] == -1
    assert report["emptied_windows"] == 0
    assert report["blacklist_cleared"] == 1


@pytest.mark.asyncio
async def test_run_forever_sweeps_off_the_loop_until_cancelled(components, monkeypatch):
    loop_thread = threading.get_ident()
    sweeps = []
    monkeypatch.setattr(components.cleanup_task, "run_once", lambda: sweeps.append(threading.get_ident()))
    components.cleanup_task.interval_seconds = 0

    task = asyncio.create_task(components.cleanup_task.run_forever())
    while len(sweeps) < 3:
        await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert loop_thread not in sweeps
