"""
Frame-rate bookkeeping for the control loop.
"""

import time
from typing import Callable, Dict


class PerformanceMonitor:
    """
    Counts ticks per one-second window and measures the last tick duration.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter, window_s: float = 1.0):
        """
        Args:
            clock: Monotonic time source in seconds
            window_s: Length of the frame-rate averaging window
        """
        self.clock = clock
        self.window_s = window_s

        self.frame_count = 0
        self.fps = 0.0
        self.frame_time_ms = 0.0
        self._window_start = clock()
        self._frame_start = self._window_start

    def start_frame(self):
        self._frame_start = self.clock()

    def end_frame(self):
        now = self.clock()
        self.frame_time_ms = (now - self._frame_start) * 1000.0
        self.frame_count += 1

        elapsed = now - self._window_start
        if elapsed >= self.window_s:
            self.fps = self.frame_count / elapsed
            self.frame_count = 0
            self._window_start = now

    def get_stats(self) -> Dict[str, float]:
        return {
            'fps': self.fps,
            'frame_time_ms': self.frame_time_ms,
        }
