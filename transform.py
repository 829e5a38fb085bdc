"""
stridebeats - Transform
Position plus an orthonormal forward/right basis. The locomotion controller
reads the basis and writes positions; nothing else moves the walker.
"""

from typing import Optional

import numpy as np

from motion_math import as_vector, normalized


class Transform:
    """Minimal scene transform backed by numpy vectors."""

    def __init__(self, position=(0.0, 0.0, 0.0),
                 forward=(0.0, 0.0, 1.0),
                 right: Optional[tuple] = None,
                 up=(0.0, 1.0, 0.0)):
        self._position = as_vector(position)
        self.forward = normalized(forward)
        if right is None:
            # Left-handed, y-up basis: right = up x forward
            right = np.cross(as_vector(up), self.forward)
        right_vec = normalized(right)
        # Keep right orthogonal to forward so lateral and forward offsets never mix
        right_vec = right_vec - self.forward * float(np.dot(right_vec, self.forward))
        self.right = normalized(right_vec)

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    def set_position(self, position) -> None:
        self._position = as_vector(position)

    def __repr__(self) -> str:
        p = self._position
        return f"Transform(position=({p[0]:.3f}, {p[1]:.3f}, {p[2]:.3f}))"
