from storefront_api.integrations.circuit_breaker import (
    STATE_CLOSED,
    STATE_HALF_OPEN,
    STATE_OPEN,
    CircuitBreaker,
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_opens_after_threshold() -> None:
    breaker = CircuitBreaker("test", threshold=3, timeout=30, clock=FakeClock())

    for _ in range(2):
        breaker.record_failure()
    assert breaker.allow_request()

    breaker.record_failure()
    assert breaker.state == STATE_OPEN
    assert not breaker.allow_request()


def test_success_resets_failure_count() -> None:
    breaker = CircuitBreaker("test", threshold=2, clock=FakeClock())

    breaker.record_failure()
    breaker.record_success()
    breaker.record_failure()

    assert breaker.state == STATE_CLOSED


def test_half_open_trial_after_timeout() -> None:
    clock = FakeClock()
    breaker = CircuitBreaker("test", threshold=1, timeout=30, clock=clock)
    breaker.record_failure()

    clock.now += 29
    assert not breaker.allow_request()

    clock.now += 1
    assert breaker.allow_request()
    assert breaker.state == STATE_HALF_OPEN
    # only one trial call at a time
    assert not breaker.allow_request()

    breaker.record_success()
    assert breaker.get_state()["state"] == STATE_CLOSED


def test_failed_trial_reopens() -> None:
    clock = FakeClock()
    breaker = CircuitBreaker("test", threshold=1, timeout=30, clock=clock)
    breaker.record_failure()

    clock.now += 30
    assert breaker.allow_request()
    breaker.record_failure()

    assert breaker.state == STATE_OPEN
    assert not breaker.allow_request()
