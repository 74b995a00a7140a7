"""
Unit tests for service helpers: read-through resolution, line values,
login lockout bookkeeping and driver seeding.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from backoffice.app.core.exceptions import ResourceNotFoundError
from backoffice.app.models.driver import Driver
from backoffice.app.models.user import User
from backoffice.app.schemas.common import Source
from backoffice.app.services.driver_seed import seed_drivers_from_csv
from backoffice.app.services.login_attempts import is_locked_out, register_failed_attempt, reset_attempts
from backoffice.app.services.plan_service import compute_line_value
from backoffice.app.services.read_through import ReadThroughResolver, is_miss

from conftest import TestingSessionLocal

NOW = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


class Recorder:
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def __call__(self, *key):
        self.calls.append(key)
        return self.result


@pytest.mark.asyncio
async def test_local_hit_is_terminal():
    local, external = Recorder({"id": "p1"}), Recorder({"id": "p1", "remote": True})

    resolved = await ReadThroughResolver("Plan", local, external).resolve("p1")

    assert resolved.source == Source.LOCAL
    assert resolved.entity == {"id": "p1"}
    assert external.calls == []


@pytest.mark.asyncio
async def test_empty_local_result_falls_through():
    local, external = Recorder([]), Recorder([{"id": "p1"}])

    resolved = await ReadThroughResolver("Plan", local, external).resolve("2024-05-01", "u1")

    assert resolved.source == Source.EXTERNAL
    assert external.calls == [("2024-05-01", "u1")]


@pytest.mark.asyncio
async def test_miss_everywhere_raises_not_found():
    resolver = ReadThroughResolver("Route", Recorder(None), Recorder(None))

    with pytest.raises(ResourceNotFoundError) as exc_info:
        await resolver.resolve(7)

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Route with ID '7' not found in any source"


@pytest.mark.parametrize("value, expected", [
    (None, True),
    ([], True),
    ({}, True),
    ([{"id": 1}], False),
    (0, False),
])
def test_is_miss(value, expected):
    assert is_miss(value) is expected


@pytest.mark.parametrize("quantity, unit_price, tax_rate, expected", [
    (2, 10.5, 0.19, 24.99),
    (3, 10, 0.1, 33.0),
    (1, 9.999, 0, 10.0),
    (0, 50, 0.19, 0.0),
])
def test_compute_line_value(quantity, unit_price, tax_rate, expected):
    assert compute_line_value(quantity, unit_price, tax_rate) == expected


@pytest.mark.asyncio
async def test_lockout_window(db_session, user_factory):
    user = await user_factory()

    for _ in range(3):
        await register_failed_attempt(db_session, user.id, NOW)
    await db_session.commit()

    stored = await db_session.get(User, user.id, populate_existing=True)
    assert stored.login_attempts == 3
    assert is_locked_out(stored, NOW + timedelta(minutes=14, seconds=59))
    assert not is_locked_out(stored, NOW + timedelta(minutes=15))


@pytest.mark.asyncio
async def test_failed_attempts_from_stale_sessions_are_all_counted(user_factory):
    user = await user_factory()
    sessions = [TestingSessionLocal() for _ in range(3)]
    try:
        # Every session reads the row before any of them writes.
        for session in sessions:
            loaded = await session.get(User, user.id)
            assert loaded.login_attempts == 0

        counts = []
        for session in sessions:
            counts.append(await register_failed_attempt(session, user.id, NOW))
            await session.commit()
    finally:
        for session in sessions:
            await session.close()

    assert counts == [1, 2, 3]


def test_lockout_accepts_naive_stored_timestamps():
    user = User(login_attempts=3, last_login_attempt=NOW.replace(tzinfo=None))

    assert is_locked_out(user, NOW + timedelta(minutes=1))


@pytest.mark.asyncio
async def test_failure_after_expired_lockout_starts_new_count(db_session, user_factory):
    user = await user_factory()
    for _ in range(3):
        await register_failed_attempt(db_session, user.id, NOW)
    await db_session.commit()

    attempts = await register_failed_attempt(db_session, user.id, NOW + timedelta(minutes=20))
    await db_session.commit()

    stored = await db_session.get(User, user.id, populate_existing=True)
    assert attempts == 1
    assert stored.login_attempts == 1
    assert not is_locked_out(stored, NOW + timedelta(minutes=20))


@pytest.mark.asyncio
async def test_failure_inside_window_keeps_counting(db_session, user_factory):
    user = await user_factory()
    await register_failed_attempt(db_session, user.id, NOW)

    attempts = await register_failed_attempt(db_session, user.id, NOW + timedelta(minutes=14))
    await db_session.commit()

    assert attempts == 2


def test_reset_attempts():
    user = User(login_attempts=2, last_login_attempt=NOW)

    reset_attempts(user)

    assert user.login_attempts == 0
    assert user.last_login_attempt is None


@pytest.mark.asyncio
async def test_seed_drivers_skips_bad_and_duplicate_rows(db_session, tmp_path):
    csv_file = tmp_path / "drivers.csv"
    csv_file.write_text(
        "ID,NAME\n"
        "1,Carlos Mendoza\n"
        "2,Lucia Fernandez\n"
        "2,Duplicate Lucia\n"
        "abc,Broken Id\n"
        "3,\n"
        "4,Jorge Ramirez\n",
        encoding="utf-8",
    )

    inserted = await seed_drivers_from_csv(db_session, csv_file)

    assert inserted == 3
    drivers = (await db_session.execute(select(Driver).order_by(Driver.id))).scalars().all()
    assert [(d.id, d.name) for d in drivers] == [
        (1, "Carlos Mendoza"),
        (2, "Lucia Fernandez"),
        (4, "Jorge Ramirez"),
    ]


@pytest.mark.asyncio
async def test_seed_drivers_only_runs_on_empty_table(db_session, drivers, tmp_path):
    csv_file = tmp_path / "drivers.csv"
    csv_file.write_text("ID,NAME\n9,Someone New\n", encoding="utf-8")

    assert await seed_drivers_from_csv(db_session, csv_file) == 0


@pytest.mark.asyncio
async def test_seed_drivers_missing_file(db_session, tmp_path):
    assert await seed_drivers_from_csv(db_session, tmp_path / "absent.csv") == 0
