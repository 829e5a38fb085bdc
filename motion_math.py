"""
stridebeats - Motion Math
Scalar and 3D vector helpers for per-frame walker motion.
"""

import numpy as np


def clamp01(value: float) -> float:
    """Clamp a scalar into [0, 1]."""
    return float(min(1.0, max(0.0, value)))


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation with t clamped to [0, 1]."""
    t = clamp01(t)
    return a + (b - a) * t


def as_vector(value) -> np.ndarray:
    """Return a float64 copy shaped (3,)."""
    vec = np.array(value, dtype=np.float64).reshape(3)
    return vec


def normalized(value) -> np.ndarray:
    """Unit vector in the direction of value. Zero-length input is rejected."""
    vec = as_vector(value)
    length = float(np.linalg.norm(vec))
    if length < 1e-12:
        raise ValueError("cannot normalize a zero-length vector")
    return vec / length


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(b - a))


def move_towards(current: np.ndarray, target: np.ndarray, max_delta: float) -> np.ndarray:
    """Advance current toward target by at most max_delta, never overshooting."""
    delta = target - current
    dist = float(np.linalg.norm(delta))
    if dist <= max_delta or dist < 1e-12:
        return target.copy()
    return current + delta / dist * max_delta


def axis_distance(point: np.ndarray, origin: np.ndarray, axis: np.ndarray) -> float:
    """Signed distance of point from origin measured along a unit axis."""
    return float(np.dot(point - origin, axis))
