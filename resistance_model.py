"""
stridebeats - Descent Resistance
While the walker is carried back, every press adds resistance (slowing the
automatic motion) and tries to shove the walker sideways. Sideways shoves
that would leave the corridor around the ideal line are dropped.
"""

from typing import Optional

import numpy as np

from config import DescentConfig
from motion_math import clamp01, distance

# Float slack when comparing a shove against the corridor edge
_DEVIATION_EPSILON = 1e-9


def line_progress(position: np.ndarray, line_start: np.ndarray, line_end: np.ndarray) -> float:
    """How far along start -> end the walker is (0..1), by remaining distance.
    A zero-length line counts as already arrived."""
    total = distance(line_start, line_end)
    if total < 1e-9:
        return 1.0
    return clamp01(1.0 - distance(position, line_end) / total)


class DescentResistance:
    """Resistance effect (0..1) plus lateral deviation limits."""

    def __init__(self, config: DescentConfig):
        self.config = config
        self.resistance_effect: float = 0.0

    def decay(self, dt: float) -> None:
        self.resistance_effect = clamp01(self.resistance_effect - self.config.resistance_decay * dt)

    def register_press(self) -> None:
        self.resistance_effect = clamp01(self.resistance_effect + self.config.resistance_slowdown)

    def reset(self) -> None:
        self.resistance_effect = 0.0

    @property
    def speed_factor(self) -> float:
        """Multiplier on automatic backward speed."""
        return 1.0 - self.resistance_effect

    @property
    def animation_damping(self) -> float:
        """Multiplier on the backward animation speed."""
        return 1.0 - self.resistance_effect * 0.5

    def lateral_offset(self, position: np.ndarray, right_axis: np.ndarray,
                       line_start: np.ndarray, line_end: np.ndarray,
                       progress: Optional[float] = None) -> float:
        """Sideways distance of position from the ideal point on the line."""
        if progress is None:
            progress = line_progress(position, line_start, line_end)
        ideal = line_start + (line_end - line_start) * progress
        return abs(float(np.dot(position - ideal, right_axis)))

    def try_lateral_push(self, position: np.ndarray, direction: int, right_axis: np.ndarray,
                         line_start: np.ndarray, line_end: np.ndarray,
                         dt: float) -> Optional[np.ndarray]:
        """Return the shoved position, or None when the shove leaves the corridor.

        direction is -1 (toward -right), +1 (toward +right) or 0 (no shove).
        """
        if direction == 0:
            return None

        candidate = position + right_axis * (direction * self.config.resistance_strength * dt)
        progress = line_progress(position, line_start, line_end)
        offset = self.lateral_offset(candidate, right_axis, line_start, line_end, progress)
        if offset <= self.config.max_sideways_deviation + _DEVIATION_EPSILON:
            return candidate
        return None
