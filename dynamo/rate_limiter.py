"""Token-bucket rate limiting for a single generator task."""

import asyncio
import math
import time

CAPACITY_FACTOR = 100
REFILL_FACTOR = 1.01
REFILL_INTERVAL = 1.0


class RateLimiter:
    """Token bucket that credits a fixed amount once per interval.

    The refill amount may be fractional: the balance is kept as a float and
    only whole tokens are admitted, so a refill of 1.01 per interval yields
    one record per interval plus one extra every hundred intervals. Credit is
    given in whole intervals counted from construction and the balance never
    exceeds *capacity*. Not safe to share between tasks; each generator owns
    its own limiter.
    """

    def __init__(
        self,
        capacity: int,
        refill: float,
        interval: float = REFILL_INTERVAL,
        initial: float = 0,
        time_func=None,
        sleep_func=None,
    ):
        if capacity < 1 or refill <= 0:
            raise ValueError("capacity must be >= 1 and refill > 0")
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._capacity = capacity
        self._refill = float(refill)
        self._interval = interval
        self._tokens = float(min(initial, capacity))
        self._time_func = time_func or time.monotonic
        self._sleep = sleep_func or asyncio.sleep
        self._last_refill = self._time_func()

    @classmethod
    def for_rate(cls, rate_per_s: int, interval: float = REFILL_INTERVAL, **kwargs) -> "RateLimiter":
        """Build the limiter used for a category emitting *rate_per_s* records."""
        if rate_per_s <= 0:
            raise ValueError(f"rate must be > 0, got {rate_per_s}")
        return cls(
            capacity=rate_per_s * CAPACITY_FACTOR,
            refill=rate_per_s * REFILL_FACTOR,
            interval=interval,
            initial=0,
            **kwargs,
        )

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def refill(self) -> float:
        return self._refill

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def available(self) -> int:
        """Whole tokens that can be taken right now."""
        self._top_up()
        return math.floor(self._tokens)

    def _top_up(self) -> float:
        """Credit elapsed intervals; return seconds until the next refill."""
        now = self._time_func()
        periods = int((now - self._last_refill) // self._interval)
        if periods > 0:
            self._tokens = min(float(self._capacity), self._tokens + periods * self._refill)
            self._last_refill += periods * self._interval
        return self._last_refill + self._interval - now

    def try_acquire(self) -> bool:
        """Take one token without waiting. Returns False if none is available."""
        self._top_up()
        if self._tokens >= 1:
            self._tokens -= 1
            return True
        return False

    async def acquire(self) -> None:
        """Suspend until a whole token is available, then consume it."""
        while True:
            wait = self._top_up()
            if self._tokens >= 1:
                self._tokens -= 1
                return
            await self._sleep(max(wait, 0.0))
