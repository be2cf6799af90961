"""
Fixed inter-request delay applied after vendor-site navigation.
"""

from __future__ import annotations

import time
from collections.abc import Callable


class NavigationThrottle:
    """
    Sleeps a fixed delay after each navigation to keep vendor-site load predictable.
    """

    def __init__(
        self,
        *,
        delay_ms: int,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._delay_seconds = max(0, delay_ms) / 1000.0
        self._sleep = sleep
        self.pauses = 0

    @property
    def delay_seconds(self) -> float:
        return self._delay_seconds

    def pause(self) -> None:
        self.pauses += 1
        if self._delay_seconds > 0:
            self._sleep(self._delay_seconds)
