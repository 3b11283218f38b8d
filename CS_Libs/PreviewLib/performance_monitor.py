"""
Rolling per-operation timing statistics.

Each operation keeps its most recent 50 durations (milliseconds,
measured with the monotonic ``time.perf_counter`` clock).

Example:
    >>> monitor = PerformanceMonitor()
    >>> stop = monitor.start_timer("apply_color_splash")
    >>> ...
    >>> stop()
    >>> monitor.get_stats("apply_color_splash")
    {'average': 12.5, 'min': 12.5, 'max': 12.5, 'count': 1}
"""

import time
from collections import deque
from contextlib import contextmanager
from typing import Callable, Deque, Dict, Iterator, Optional

from CS_Libs.ColorLib.color_model import round_half_up
from CS_Libs.constants import PERFORMANCE_WINDOW_SIZE, STATS_DECIMALS

OperationStats = Dict[str, float]


class PerformanceMonitor:
    """Tracks processing times per named operation."""

    def __init__(self, window_size: int = PERFORMANCE_WINDOW_SIZE, clock: Callable[[], float] = time.perf_counter):
        self.window_size = window_size
        self._clock = clock
        self._measurements: Dict[str, Deque[float]] = {}

    def start_timer(self, operation_name: str) -> Callable[[], float]:
        """
        Start timing an operation.

        Returns:
            A stop function that records and returns the elapsed milliseconds
        """
        start = self._clock()

        def stop() -> float:
            duration = (self._clock() - start) * 1000.0
            self.record_measurement(operation_name, duration)
            return duration

        return stop

    @contextmanager
    def measure(self, operation_name: str) -> Iterator[None]:
        """Time a block; the sample is recorded even if the block raises."""
        stop = self.start_timer(operation_name)
        try:
            yield
        finally:
            stop()

    def record_measurement(self, operation_name: str, duration: float) -> None:
        if operation_name not in self._measurements:
            self._measurements[operation_name] = deque(maxlen=self.window_size)
        self._measurements[operation_name].append(duration)

    def get_stats(self, operation_name: str) -> Optional[OperationStats]:
        """
        Get statistics for an operation.

        Returns:
            Dictionary with average, min, max (rounded to two decimals) and
            count, or None when nothing has been recorded
        """
        measurements = self._measurements.get(operation_name)
        if not measurements:
            return None

        average = sum(measurements) / len(measurements)
        return {
            "average": round_half_up(average, STATS_DECIMALS),
            "min": round_half_up(min(measurements), STATS_DECIMALS),
            "max": round_half_up(max(measurements), STATS_DECIMALS),
            "count": len(measurements),
        }

    def get_all_stats(self) -> Dict[str, Optional[OperationStats]]:
        return {name: self.get_stats(name) for name in self._measurements}

    def clear(self) -> None:
        self._measurements.clear()
