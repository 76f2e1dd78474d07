"""
Outbound rate gate for the MusicBrainz search API.
"""

import asyncio
import time
from typing import Optional

from shared.logging import get_logger


class RateGate:
    """Enforces a minimum spacing between outbound calls.

    All callers funnel through one lock, so concurrent requests are admitted
    one at a time, each at least ``min_interval`` seconds after the previous
    admission. There is no queue policy beyond the lock's own FIFO wakeup.
    """

    def __init__(self, min_interval: float = 0.020):
        if min_interval < 0:
            raise ValueError("min_interval must not be negative")
        self.min_interval = min_interval
        self.logger = get_logger("web.rate_gate")
        self._lock = asyncio.Lock()
        self._last_admission: Optional[float] = None

    async def acquire(self) -> float:
        """Wait for a slot; returns the number of seconds spent waiting."""
        async with self._lock:
            waited = 0.0
            if self._last_admission is not None:
                elapsed = time.monotonic() - self._last_admission
                if elapsed < self.min_interval:
                    waited = self.min_interval - elapsed
                    await asyncio.sleep(waited)
            self._last_admission = time.monotonic()

        if waited:
            self.logger.debug("Rate gate delayed call", waited_ms=round(waited * 1000, 2))
        return waited
