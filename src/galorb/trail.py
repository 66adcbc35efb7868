"""
Fixed-capacity position history for drawing fading trails.
"""

from collections import deque

import numpy as np

from galorb import constants as const


class TrailBuffer:
    """
    Most-recent-first ring buffer of 3D positions.

    push() inserts at the front and drops the oldest sample once capacity
    is exceeded. as_array() always returns a full (capacity, 3) array:
    slots beyond the logical length repeat the oldest sample, so a line
    drawn through the array never jumps to undefined points.
    """

    def __init__(self, capacity: int = const.TRAIL_LENGTH):
        if capacity < 1:
            raise ValueError(f"Trail capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._samples = deque(maxlen=capacity)

    def push(self, position) -> None:
        """Insert a position at the front of the trail (copied)."""
        self._samples.appendleft(np.array(position, dtype=np.float64).reshape(3))

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def newest(self) -> np.ndarray:
        return self._samples[0]

    @property
    def oldest(self) -> np.ndarray:
        return self._samples[-1]

    def samples(self) -> np.ndarray:
        """(len, 3) array of the stored samples, newest first."""
        if not self._samples:
            return np.zeros((0, 3))
        return np.array(self._samples)

    def as_array(self) -> np.ndarray:
        """
        Full (capacity, 3) array for upload to a line primitive.

        Returns zeros when nothing has been pushed yet.
        """
        out = np.zeros((self.capacity, 3))
        n = len(self._samples)
        if n == 0:
            return out
        out[:n] = np.array(self._samples)
        out[n:] = self._samples[-1]
        return out

    def clear(self) -> None:
        self._samples.clear()

    def __repr__(self) -> str:
        return f"TrailBuffer({len(self)}/{self.capacity})"
