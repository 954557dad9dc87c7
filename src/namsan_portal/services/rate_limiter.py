"""Fixed-window rate limiter for the chat relay.

One instance per process, created in the app lifespan and handed to the chat
service by reference. Buckets live in process memory only: several workers or
instances each enforce the limit on their own, so the effective limit scales
with the number of processes. A deployment that needs a global limit has to
keep the buckets in a shared store instead.

Bursts aligned to a window boundary may briefly reach twice the nominal rate;
that is the accepted cost of a fixed window over a sliding one.
"""
import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class RateLimitBucket:
    count: int
    reset_at: float

    def expired(self, now: float) -> bool:
        return now > self.reset_at


class FixedWindowRateLimiter:
    """Per-identity request counter over fixed windows.

    `allow` never awaits between reading and writing a bucket, so calls on a
    single event loop cannot lose updates.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._buckets: dict[str, RateLimitBucket] = {}
        self._sweeper: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self._buckets)

    def bucket(self, identity: str) -> RateLimitBucket | None:
        return self._buckets.get(identity)

    def allow(self, identity: str, max_requests: int, window_seconds: float) -> bool:
        """Count one request for `identity`; False when its window is used up.

        A denied request leaves the bucket untouched.
        """
        now = self._clock()
        bucket = self._buckets.get(identity)
        if bucket is None or bucket.expired(now):
            self._buckets[identity] = RateLimitBucket(count=1, reset_at=now + window_seconds)
            return True
        if bucket.count >= max_requests:
            return False
        bucket.count += 1
        return True

    def sweep(self) -> int:
        """Drop buckets whose window has passed; returns how many were removed."""
        now = self._clock()
        stale = [key for key, bucket in self._buckets.items() if bucket.expired(now)]
        for key in stale:
            del self._buckets[key]
        return len(stale)

    def start_sweeper(self, interval_seconds: float) -> None:
        """Run sweep() every `interval_seconds` on the running loop until stop()."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.get_running_loop().create_task(
            self._sweep_forever(interval_seconds)
        )

    async def _sweep_forever(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.sweep()
            if removed:
                logger.debug("Rate limiter swept %d expired buckets", removed)

    async def stop(self) -> None:
        """Cancel the sweeper task, if running."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
