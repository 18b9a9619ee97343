from datetime import UTC, datetime, timedelta

import pytest

from lumos.adapters.clock import FixedClock
from lumos.app_shell.rate_limit import RateLimiter
from lumos.rules.models import RateLimitRules

T0 = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def limiter(clock):
    return RateLimiter(RateLimitRules(), clock)


def test_allow_request_basic(limiter):
    assert limiter.allow_request("k", 60, 2) is True
    assert limiter.allow_request("k", 60, 2) is True
    assert limiter.allow_request("k", 60, 2) is False  # Limit reached


def test_keys_are_independent(limiter):
    assert limiter.allow_request("a", 60, 1) is True
    assert limiter.allow_request("b", 60, 1) is True
    assert limiter.allow_request("a", 60, 1) is False


def test_window_slides(limiter, clock):
    assert limiter.allow_request("k", 10, 1) is True
    assert limiter.allow_request("k", 10, 1) is False

    clock.set(T0 + timedelta(seconds=11))
    assert limiter.allow_request("k", 10, 1) is True


def test_denied_requests_are_not_recorded(limiter, clock):
    assert limiter.allow_request("k", 10, 1) is True
    clock.set(T0 + timedelta(seconds=5))
    assert limiter.allow_request("k", 10, 1) is False

    # Only the first attempt counts toward the window
    clock.set(T0 + timedelta(seconds=10, microseconds=1))
    assert limiter.allow_request("k", 10, 1) is True


def test_zero_limit_always_denies(limiter):
    assert limiter.allow_request("k", 60, 0) is False


def test_reset(limiter):
    limiter.allow_request("k", 60, 1)
    limiter.reset()
    assert limiter.allow_request("k", 60, 1) is True
