import pytest

from taskvault.safety.throttler import Throttler
from taskvault.utils.exceptions import RateLimitError


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_limit_then_blocks():
    clock = FakeClock()
    throttler = Throttler(max_requests=3, window_seconds=60, clock=clock)
    for _ in range(3):
        assert throttler.can_execute("1.2.3.4") == (True, None)
    allowed, retry_after = throttler.can_execute("1.2.3.4")
    assert allowed is False
    assert retry_after == 60


def test_keys_are_independent():
    throttler = Throttler(max_requests=1, window_seconds=60, clock=FakeClock())
    assert throttler.can_execute("a")[0] is True
    assert throttler.can_execute("b")[0] is True
    assert throttler.can_execute("a")[0] is False


def test_window_slides():
    clock = FakeClock()
    throttler = Throttler(max_requests=2, window_seconds=60, clock=clock)
    throttler.can_execute("a")
    clock.now += 30
    throttler.can_execute("a")
    assert throttler.can_execute("a")[0] is False
    clock.now += 31
    assert throttler.can_execute("a")[0] is True


def test_check_raises_with_retry_after():
    clock = FakeClock()
    throttler = Throttler(max_requests=1, window_seconds=60, clock=clock)
    throttler.check("a")
    clock.now += 10
    with pytest.raises(RateLimitError) as exc:
        throttler.check("a")
    assert exc.value.retry_after == 50
