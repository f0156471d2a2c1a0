"""Wall-clock helpers expressed in epoch milliseconds."""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], int]


def epoch_millis() -> int:
    return int(time.time() * 1000)


__all__ = ["Clock", "epoch_millis"]
