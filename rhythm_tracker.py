"""
stridebeats - Rhythm Tracker
Learns the player's click period from a sliding window of inter-click
intervals and judges whether a new click lands on that beat.

Before a rhythm is learned the window around the ideal interval is
asymmetric: clicks may come up to 2x tolerance late but only 1x early.
"""

from collections import deque
from typing import Optional

import numpy as np

from config import RhythmConfig
from logging_utils import log_event
from motion_math import clamp01


# Confidence a window must exceed before its mean becomes the beat period
ESTABLISH_CONFIDENCE = 0.7


class RhythmTracker:
    """Sliding-window beat period estimator for step clicks."""

    def __init__(self, config: RhythmConfig):
        self.config = config
        self.intervals: deque = deque(maxlen=self._capacity())
        self.has_established_rhythm: bool = False
        self.established_period: float = 0.0
        self.confidence: float = 0.0
        self.last_click_time: Optional[float] = None

    def _capacity(self) -> int:
        return max(1, int(self.config.min_beats_for_rhythm)) + 2

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def is_valid_rhythm_step(self, now: float) -> bool:
        """Return True when a click at `now` matches the expected timing."""
        if self.last_click_time is None:
            return True

        dt = now - self.last_click_time
        tolerance = self.config.rhythm_tolerance

        if not self.has_established_rhythm:
            ideal = self.config.ideal_beat_interval
            return (ideal - tolerance) <= dt <= (ideal + 2.0 * tolerance)

        return abs(dt - self.established_period) <= tolerance

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    def update_tracking(self, now: float) -> None:
        """Record a correctly alternated click, valid in rhythm or not."""
        if self.last_click_time is not None:
            self.intervals.append(now - self.last_click_time)
            if len(self.intervals) >= self.config.min_beats_for_rhythm:
                self._recompute_rhythm()

        self.last_click_time = now

    def _recompute_rhythm(self) -> None:
        window = np.asarray(self.intervals, dtype=np.float64)
        mean = float(np.mean(window))
        stddev = float(np.std(window))  # population stddev
        tolerance = self.config.rhythm_tolerance
        if tolerance > 0:
            self.confidence = clamp01(1.0 - stddev / tolerance)
        else:
            self.confidence = 1.0 if stddev == 0.0 else 0.0

        if self.confidence > ESTABLISH_CONFIDENCE:
            was_established = self.has_established_rhythm
            old_period = self.established_period
            self.established_period = mean
            self.has_established_rhythm = True
            if not was_established:
                log_event("INFO", "Rhythm", "Rhythm established",
                          period=f"{mean:.3f}s", confidence=f"{self.confidence:.2f}",
                          samples=len(window))
            elif abs(old_period - mean) > 1e-3:
                log_event("DEBUG", "Rhythm", "Period updated",
                          old=f"{old_period:.3f}s", new=f"{mean:.3f}s",
                          confidence=f"{self.confidence:.2f}")
        else:
            log_event("DEBUG", "Rhythm", "Window not steady",
                      mean=f"{mean:.3f}s", stddev=f"{stddev:.3f}s",
                      confidence=f"{self.confidence:.2f}")

    def reset(self) -> None:
        """Forget everything learned this cycle."""
        if self.intervals.maxlen != self._capacity():
            self.intervals = deque(maxlen=self._capacity())
        else:
            self.intervals.clear()
        self.has_established_rhythm = False
        self.established_period = 0.0
        self.confidence = 0.0
        self.last_click_time = None

    def get_rhythm_info(self) -> dict:
        """Snapshot for status lines and reports."""
        return {
            'established': self.has_established_rhythm,
            'period': self.established_period,
            'confidence': self.confidence,
            'interval_count': len(self.intervals),
            'last_click_time': self.last_click_time,
        }
