#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Test suite for coord_utils module.
"""

import sys
import unittest
from pathlib import Path

import numpy as np

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from stereo_init.utils.coord_utils import (
    as_row_col_array,
    to_homogeneous_uv,
    adapt_keypoints,
    from_homogeneous,
    row_col_to_uv,
    uv_to_row_col,
)
from stereo_init.utils.error_handling import ConfigurationError


class TestCoordUtils(unittest.TestCase):
    """Test cases for coord_utils module."""

    def test_as_row_col_array_column_layout(self):
        """(2, N) input is returned unchanged."""
        points = np.array([[10.0, 20.0, 30.0], [1.0, 2.0, 3.0]])
        result = as_row_col_array(points)
        np.testing.assert_array_equal(result, points)

    def test_as_row_col_array_row_layout(self):
        """Lists of pairs are transposed."""
        result = as_row_col_array([(10, 1), (20, 2), (30, 3)])
        np.testing.assert_array_equal(result, [[10, 20, 30], [1, 2, 3]])
        self.assertEqual(result.dtype, np.float64)

    def test_as_row_col_array_two_pairs(self):
        """Two (row, col) pairs stay two points even though the shape is (2, 2)."""
        result = as_row_col_array([(240.0, 320.0), (100.0, 400.0)])
        np.testing.assert_array_equal(result, [[240.0, 100.0], [320.0, 400.0]])

        result = as_row_col_array(np.array([[240.0, 100.0], [320.0, 400.0]]))
        np.testing.assert_array_equal(result, [[240.0, 100.0], [320.0, 400.0]])

    def test_as_row_col_array_explicit_layout(self):
        """An (N, 2) ndarray needs layout="rows"."""
        points = np.array([[10.0, 1.0], [20.0, 2.0], [30.0, 3.0]])
        np.testing.assert_array_equal(as_row_col_array(points, layout="rows"),
                                      [[10.0, 20.0, 30.0], [1.0, 2.0, 3.0]])
        with self.assertRaises(ConfigurationError):
            as_row_col_array(points)
        with self.assertRaises(ConfigurationError):
            as_row_col_array(points, layout="diagonal")

    def test_as_row_col_array_copies(self):
        """The result never shares memory with the input."""
        points = np.array([[10.0, 20.0], [1.0, 2.0]])
        result = as_row_col_array(points)
        result[0, 0] = -1.0
        self.assertEqual(points[0, 0], 10.0)

    def test_as_row_col_array_empty(self):
        """Empty input gives a 0-column array."""
        self.assertEqual(as_row_col_array([]).shape, (2, 0))
        self.assertEqual(as_row_col_array(np.zeros((2, 0))).shape, (2, 0))

    def test_as_row_col_array_invalid(self):
        """Anything that is not 2 x N is rejected."""
        with self.assertRaises(ConfigurationError):
            as_row_col_array(np.zeros((3, 4)))
        with self.assertRaises(ConfigurationError):
            as_row_col_array(np.zeros(5))

    def test_to_homogeneous_uv(self):
        """Rows and columns are swapped and a row of ones appended."""
        points_rc = np.array([[240.0, 100.0], [320.0, 50.0]])
        result = to_homogeneous_uv(points_rc)
        np.testing.assert_array_equal(result, [[320.0, 50.0], [240.0, 100.0], [1.0, 1.0]])

    def test_adapt_keypoints(self):
        """The (row, col) keypoints are passed through next to the homogeneous (u, v) ones."""
        points_rc, points_h = adapt_keypoints(np.array([[5.0, 6.0], [7.0, 8.0]]))
        np.testing.assert_array_equal(points_rc, [[5.0, 6.0], [7.0, 8.0]])
        np.testing.assert_array_equal(points_h, [[7.0, 8.0], [5.0, 6.0], [1.0, 1.0]])

    def test_adapt_keypoints_empty(self):
        """Empty input yields 0-column outputs."""
        points_rc, points_h = adapt_keypoints(np.zeros((2, 0)))
        self.assertEqual(points_rc.shape, (2, 0))
        self.assertEqual(points_h.shape, (3, 0))

    def test_from_homogeneous(self):
        """Division by the last row, infinity for points at infinity."""
        result = from_homogeneous(np.array([[2.0, 1.0], [4.0, 1.0], [2.0, 0.0]]))
        np.testing.assert_array_equal(result[:, 0], [1.0, 2.0])
        self.assertTrue(np.isinf(result[0, 1]))

    def test_row_col_uv_conversion(self):
        """Both conversions swap the two rows."""
        points_rc = np.array([[1.0, 2.0], [3.0, 4.0]])
        np.testing.assert_array_equal(row_col_to_uv(points_rc), [[3.0, 4.0], [1.0, 2.0]])
        np.testing.assert_array_equal(uv_to_row_col(row_col_to_uv(points_rc)), points_rc)


if __name__ == "__main__":
    unittest.main()
