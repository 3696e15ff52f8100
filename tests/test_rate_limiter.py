from __future__ import annotations

import pytest
from fastapi import HTTPException

from tarjeta.core import rate_limiter
from tarjeta.core.rate_limiter import _RateLimiter


def test_limit_is_enforced_per_key(monkeypatch):
    monkeypatch.setattr(rate_limiter.time, "time", lambda: 1000.0)
    limiter = _RateLimiter()

    limiter.check("contacts:1.1.1.1", 2, 60)
    limiter.check("contacts:1.1.1.1", 2, 60)
    with pytest.raises(HTTPException) as exc:
        limiter.check("contacts:1.1.1.1", 2, 60)
    assert exc.value.status_code == 429

    limiter.check("contacts:2.2.2.2", 2, 60)


def test_expired_windows_are_dropped(monkeypatch):
    clock = {"now": 1000.0}
    monkeypatch.setattr(rate_limiter.time, "time", lambda: clock["now"])
    limiter = _RateLimiter()

    for i in range(5):
        limiter.check(f"contacts:10.0.0.{i}", 10, 60)
    assert len(limiter) == 5

    clock["now"] += 61
    limiter.check("contacts:10.0.0.99", 10, 60)

    assert len(limiter) == 1
