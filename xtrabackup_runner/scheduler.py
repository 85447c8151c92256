"""Sleep-and-repeat loop for ``RUN_EVERY``."""
from __future__ import annotations

import time
from typing import Callable, Optional


class Scheduler:
    """Run a cycle once, or forever with ``interval`` seconds between cycles.

    ``sleep`` is injectable so tests can drive cycles without waiting.
    Exceptions raised by the cycle end the loop.
    """

    def __init__(self, interval: Optional[float], sleep: Callable[[float], None] = time.sleep) -> None:
        self.interval = interval
        self.sleep = sleep
        self._stopped = False

    def stop(self) -> None:
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    def run(self, cycle: Callable[[], object], max_cycles: Optional[int] = None) -> int:
        count = 0
        while not self._stopped:
            cycle()
            count += 1
            if self.interval is None:
                break
            if max_cycles is not None and count >= max_cycles:
                break
            if self._stopped:
                break
            self.sleep(self.interval)
        return count
