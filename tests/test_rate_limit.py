from budget_recipes.app.services.rate_limit import RateLimiter


class Tick:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_limit_applies_per_identity_and_resets():
    tick = Tick()
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=tick)

    assert limiter.hit("a")
    assert limiter.hit("a")
    assert not limiter.hit("a")
    assert limiter.hit("b")
    assert limiter.remaining("a") == 0

    tick.now = 61.0
    assert limiter.hit("a")
    assert limiter.remaining("a") == 1


def test_evict_expired_drops_old_windows():
    tick = Tick()
    limiter = RateLimiter(max_requests=5, window_seconds=10, clock=tick)
    limiter.hit("a")
    tick.now = 5.0
    limiter.hit("b")
    tick.now = 12.0
    assert limiter.evict_expired() == 1
    assert len(limiter) == 1
