"""
Unit tests for the trail ring buffer.
"""

import numpy as np
import pytest

from galorb.trail import TrailBuffer
from galorb import constants as const


class TestTrailBuffer:

    def test_default_capacity(self):
        assert TrailBuffer().capacity == const.TRAIL_LENGTH

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            TrailBuffer(0)

    def test_newest_first(self):
        trail = TrailBuffer(5)
        for i in range(3):
            trail.push((i, 0, 0))

        assert len(trail) == 3
        np.testing.assert_array_equal(trail.newest, [2, 0, 0])
        np.testing.assert_array_equal(trail.oldest, [0, 0, 0])
        np.testing.assert_array_equal(trail.samples()[:, 0], [2, 1, 0])

    def test_drops_oldest_at_capacity(self):
        trail = TrailBuffer(3)
        for i in range(10):
            trail.push((i, i, i))

        assert len(trail) == 3
        np.testing.assert_array_equal(trail.samples()[:, 0], [9, 8, 7])

    def test_as_array_pads_with_oldest(self):
        trail = TrailBuffer(4)
        trail.push((1, 0, 0))
        trail.push((2, 0, 0))

        array = trail.as_array()
        assert array.shape == (4, 3)
        np.testing.assert_array_equal(array[:, 0], [2, 1, 1, 1])

    def test_as_array_empty(self):
        array = TrailBuffer(3).as_array()
        assert array.shape == (3, 3)
        assert np.all(array == 0.0)
        assert TrailBuffer(3).samples().shape == (0, 3)

    def test_push_copies(self):
        trail = TrailBuffer(2)
        position = np.array([1.0, 2.0, 3.0])
        trail.push(position)
        position[0] = 99.0

        np.testing.assert_array_equal(trail.newest, [1.0, 2.0, 3.0])

    def test_clear(self):
        trail = TrailBuffer(2)
        trail.push((1, 1, 1))
        trail.clear()
        assert len(trail) == 0
