"""
stridebeats - Response Curves
Monotonic [0,1] -> [0,1] curves defined by control points and an
interpolation rule, so difficulty shaping is configured as data.
"""

from typing import Sequence

import numpy as np
from scipy.interpolate import PchipInterpolator

from config import CurveConfig, CurveInterpolation
from motion_math import clamp01


class ResponseCurve:
    """
    Piecewise curve over control points (x, y).

    LINEAR       straight segments
    EASE_IN_OUT  cubic Hermite with zero tangents at every key; with the
                 default keys (0,0),(1,1) this is smoothstep 3t^2 - 2t^3
    PCHIP        monotone cubic through all keys (no overshoot between keys)

    Inputs outside the key range clamp to the end keys; outputs clamp to [0,1].
    """

    def __init__(self, points: Sequence[Sequence[float]],
                 interpolation: CurveInterpolation = CurveInterpolation.EASE_IN_OUT):
        keys = np.asarray(points, dtype=np.float64)
        if keys.ndim != 2 or keys.shape[1] != 2 or keys.shape[0] < 2:
            raise ValueError("response curve needs at least two (x, y) control points")
        if np.any(np.diff(keys[:, 0]) <= 0):
            raise ValueError("response curve control point x values must strictly increase")

        self.xs = keys[:, 0]
        self.ys = keys[:, 1]
        self.interpolation = CurveInterpolation(interpolation)
        self._pchip = None
        if self.interpolation == CurveInterpolation.PCHIP:
            self._pchip = PchipInterpolator(self.xs, self.ys, extrapolate=False)

    @classmethod
    def from_config(cls, cfg: CurveConfig) -> "ResponseCurve":
        return cls(cfg.points, cfg.interpolation)

    @classmethod
    def ease_in_out(cls) -> "ResponseCurve":
        return cls([[0.0, 0.0], [1.0, 1.0]], CurveInterpolation.EASE_IN_OUT)

    @classmethod
    def linear(cls) -> "ResponseCurve":
        return cls([[0.0, 0.0], [1.0, 1.0]], CurveInterpolation.LINEAR)

    def evaluate(self, t: float) -> float:
        x = float(np.clip(clamp01(t), self.xs[0], self.xs[-1]))

        if self.interpolation == CurveInterpolation.LINEAR:
            y = float(np.interp(x, self.xs, self.ys))
        elif self.interpolation == CurveInterpolation.PCHIP:
            y = float(self._pchip(x))
        else:
            y = self._ease_segment(x)

        return clamp01(y)

    __call__ = evaluate

    def _ease_segment(self, x: float) -> float:
        idx = int(np.searchsorted(self.xs, x, side='right')) - 1
        idx = min(max(idx, 0), len(self.xs) - 2)
        x0, x1 = self.xs[idx], self.xs[idx + 1]
        y0, y1 = self.ys[idx], self.ys[idx + 1]
        u = (x - x0) / (x1 - x0)
        u = min(1.0, max(0.0, u))
        smooth = u * u * (3.0 - 2.0 * u)
        return float(y0 + (y1 - y0) * smooth)
