"""
stridebeats - Progressive Difficulty
Forward steps get slower as the walker nears the max distance; the return
and descent get faster the farther out the walker is.
"""

from config import DifficultyConfig
from motion_math import lerp
from response_curve import ResponseCurve


class ProgressiveDifficulty:
    """Maps progress ratio (0..1) to forward / return speed multipliers."""

    def __init__(self, config: DifficultyConfig):
        self.config = config
        self.difficulty_curve = ResponseCurve.from_config(config.difficulty_curve)
        self.return_curve = ResponseCurve.from_config(config.return_curve)

    def forward_multiplier(self, progress: float) -> float:
        # Curve runs on inverted progress so near-max yields near min_forward_speed
        shaped = self.difficulty_curve(1.0 - progress)
        return lerp(self.config.min_forward_speed, 1.0, shaped)

    def return_multiplier(self, progress: float) -> float:
        shaped = self.return_curve(progress)
        return lerp(1.0, self.config.max_return_speed_multiplier, shaped)
