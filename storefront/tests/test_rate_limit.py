from __future__ import annotations

from storefront.shared.middleware.rate_limit import InMemoryRateLimiter


class TickingClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_limit_applies_per_key_within_window() -> None:
    clock = TickingClock()
    limiter = InMemoryRateLimiter(2, 10.0, clock=clock)

    assert limiter.allow("login:10.0.0.1")
    assert limiter.allow("login:10.0.0.1")
    assert not limiter.allow("login:10.0.0.1")
    assert limiter.allow("login:10.0.0.2")

    clock.now += 11
    assert limiter.allow("login:10.0.0.1")


def test_idle_clients_are_evicted() -> None:
    clock = TickingClock()
    limiter = InMemoryRateLimiter(5, 10.0, clock=clock)
    for index in range(50):
        limiter.allow(f"register:10.0.0.{index}")
    assert len(limiter) == 50

    clock.now += 11
    limiter.allow("register:192.168.1.1")

    assert len(limiter) == 1


def test_active_clients_survive_eviction() -> None:
    clock = TickingClock()
    limiter = InMemoryRateLimiter(5, 10.0, clock=clock)
    limiter.allow("quiet")
    clock.now += 6
    limiter.allow("busy")

    clock.now += 6
    limiter.allow("other")

    assert len(limiter) == 2
    assert limiter.allow("busy")
