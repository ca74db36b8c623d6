"""Wall-clock timing shared by the reference and accelerator paths."""

from __future__ import annotations

import time
from typing import Optional

from clmatbench.models import TimingSample


def now() -> float:
    return time.perf_counter()


class Stopwatch:
    """Records one ``TimingSample``.
    
    ``start()`` and ``stop()`` should sit immediately around the measured
    region. ``stop()`` returns the sample and clears the start instant.
    """
    
    def __init__(self) -> None:
        self._start: Optional[float] = None
    
    def start(self) -> None:
        self._start = now()
    
    def stop(self) -> TimingSample:
        end = now()
        if self._start is None:
            raise RuntimeError("Stopwatch.stop() called before start()")
        sample = TimingSample(start_s=self._start, end_s=end)
        self._start = None
        return sample
