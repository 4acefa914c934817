from app.middlewares.rate_limit import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_limit_within_window():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(window_seconds=60, clock=clock)

    assert limiter.allow("k", 3)
    assert limiter.allow("k", 3)
    assert limiter.allow("k", 3)
    assert not limiter.allow("k", 3)
    assert limiter.remaining("k", 3) == 0


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(window_seconds=60, clock=clock)
    limiter.allow("k", 2)
    clock.now += 30
    limiter.allow("k", 2)
    assert not limiter.allow("k", 2)

    clock.now += 31
    assert limiter.remaining("k", 2) == 1
    assert limiter.allow("k", 2)
    assert not limiter.allow("k", 2)


def test_keys_are_independent_and_resettable():
    limiter = SlidingWindowRateLimiter(window_seconds=60, clock=FakeClock())
    assert limiter.allow("a", 1)
    assert not limiter.allow("a", 1)
    assert limiter.allow("b", 1)
    assert limiter.remaining("c", 5) == 5

    limiter.reset("a")
    assert limiter.allow("a", 1)

    limiter.reset()
    assert limiter.remaining("b", 1) == 1
