from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from academy_register.core.enums import RegisterState
from academy_register.core.exceptions import LockedError, TooEarlyError, ValidationError
from academy_register.registers.lifecycle import RegisterWindow, guard_state

LONDON = ZoneInfo("Europe/London")
SESSION_DATE = date(2025, 6, 10)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def state(now: datetime, **kwargs) -> RegisterState:
    params = dict(session_date=SESSION_DATE, start_time="16:00", end_time="17:00", zone=LONDON)
    params.update(kwargs)
    return guard_state(now, **params)


def test_boundaries_for_an_afternoon_class():
    assert state(utc(2025, 6, 10, 14, 44)) is RegisterState.TOO_EARLY
    assert state(utc(2025, 6, 10, 14, 45)) is RegisterState.OPEN
    assert state(utc(2025, 6, 10, 15, 30)) is RegisterState.OPEN
    assert state(utc(2025, 6, 11, 3, 59)) is RegisterState.OPEN
    assert state(utc(2025, 6, 11, 4, 0)) is RegisterState.LOCKED


def test_states_partition_the_timeline():
    window = RegisterWindow.for_session(session_date=SESSION_DATE, start_time="16:00", end_time="17:00", zone=LONDON)
    now = utc(2025, 6, 10, 12, 0)
    previous = None
    order = [RegisterState.TOO_EARLY, RegisterState.OPEN, RegisterState.LOCKED]
    while now < utc(2025, 6, 11, 8, 0):
        current = window.state_at(now)
        if previous is not None:
            # never goes backwards
            assert order.index(current) >= order.index(previous)
        expected_open = window.opens_at <= now < window.locks_at
        assert (current is RegisterState.OPEN) == expected_open
        previous = current
        now += timedelta(minutes=1)
    assert previous is RegisterState.LOCKED


def test_custom_lead_and_lock():
    kwargs = dict(lead_minutes=30, lock_hours=1)
    assert state(utc(2025, 6, 10, 14, 30), **kwargs) is RegisterState.OPEN
    assert state(utc(2025, 6, 10, 16, 59), **kwargs) is RegisterState.OPEN
    assert state(utc(2025, 6, 10, 17, 0), **kwargs) is RegisterState.LOCKED


def test_missing_end_and_duration_locks_relative_to_start():
    window = RegisterWindow.for_session(session_date=SESSION_DATE, start_time="16:00", zone=LONDON)
    assert window.ends_at == window.starts_at == utc(2025, 6, 10, 15, 0)
    assert window.locks_at == utc(2025, 6, 11, 3, 0)


def test_duration_used_when_no_end_time():
    window = RegisterWindow.for_session(
        session_date=SESSION_DATE, start_time="16:00", duration_minutes=45, zone=LONDON
    )
    assert window.ends_at == utc(2025, 6, 10, 15, 45)


def test_end_time_only_falls_back_to_end_as_start():
    window = RegisterWindow.for_session(session_date=SESSION_DATE, start_time=None, end_time="17:00", zone=LONDON)
    assert window.starts_at == window.ends_at == utc(2025, 6, 10, 16, 0)
    assert window.opens_at == utc(2025, 6, 10, 15, 45)


def test_no_usable_times_is_a_validation_error():
    with pytest.raises(ValidationError):
        RegisterWindow.for_session(session_date=SESSION_DATE, start_time="later", end_time=None, zone=LONDON)


def test_naive_now_is_rejected():
    with pytest.raises(ValidationError):
        state(datetime(2025, 6, 10, 15, 0))


def test_ensure_open_raises_distinct_errors():
    window = RegisterWindow.for_session(session_date=SESSION_DATE, start_time="16:00", end_time="17:00", zone=LONDON)

    with pytest.raises(TooEarlyError) as early:
        window.ensure_open(utc(2025, 6, 10, 9, 0))
    assert early.value.opens_at == utc(2025, 6, 10, 14, 45)

    window.ensure_open(utc(2025, 6, 10, 15, 0))

    with pytest.raises(LockedError) as locked:
        window.ensure_open(utc(2025, 6, 12, 9, 0))
    assert locked.value.locked_at == utc(2025, 6, 11, 4, 0)
    assert str(locked.value) == "Register closed"


def test_comparison_is_on_instants_not_offsets():
    now = datetime(2025, 6, 10, 15, 45, tzinfo=LONDON)  # 14:45Z
    assert state(now) is RegisterState.OPEN
