#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Coordinate Utilities module.

Keypoints are delivered in (row, col) pixel-indexing order while projective
formulas expect (u, v) = (col, row) image coordinates. This module converts
between the two conventions and builds homogeneous coordinate arrays.
"""

import logging
from typing import Optional, Tuple, Union, Sequence

import numpy as np

from stereo_init.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)


KEYPOINT_LAYOUTS = ("columns", "rows")


def as_row_col_array(points: Union[np.ndarray, Sequence[Sequence[float]]],
                     layout: Optional[str] = None) -> np.ndarray:
    """
    Normalize a keypoint collection to a (2, N) float64 array in (row, col) order.

    The layout is never guessed from the shape, a (2, 2) input is ambiguous.
    Unless ``layout`` says otherwise, numpy arrays are read as columns (2, N)
    and any other sequence as a list of (row, col) pairs (N, 2).

    Args:
        points: Keypoints as an array or a sequence of (row, col) pairs
        layout: "columns" for (2, N), "rows" for (N, 2), None to decide from the input type

    Returns:
        (2, N) array, row 0 = image row, row 1 = image column. Always a new array.
    """
    if layout is None:
        layout = "columns" if isinstance(points, np.ndarray) else "rows"
    if layout not in KEYPOINT_LAYOUTS:
        raise ConfigurationError(f"Unknown keypoint layout '{layout}', expected one of {KEYPOINT_LAYOUTS}")

    array = np.array(points, dtype=np.float64)

    if array.size == 0:
        return np.zeros((2, 0), dtype=np.float64)

    if array.ndim != 2:
        raise ConfigurationError(f"Keypoints must be a 2D array, got shape {array.shape}")

    if layout == "rows":
        array = array.T

    if array.shape[0] != 2:
        expected = "(2, N)" if layout == "columns" else "(N, 2)"
        raise ConfigurationError(f"Keypoints in '{layout}' layout must have shape {expected}, "
                                 f"got {np.shape(points)}")

    return np.ascontiguousarray(array)


def to_homogeneous_uv(points_rc: np.ndarray) -> np.ndarray:
    """
    Convert (row, col) keypoints to homogeneous (u, v, 1) coordinates.

    Args:
        points_rc: (2, N) keypoints in (row, col) order

    Returns:
        (3, N) homogeneous array [col; row; 1]
    """
    points_rc = as_row_col_array(points_rc)
    ones = np.ones((1, points_rc.shape[1]), dtype=np.float64)
    return np.vstack((np.flipud(points_rc), ones))


def adapt_keypoints(points, layout: Optional[str] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Prepare keypoints for triangulation.

    Args:
        points: Keypoints in (row, col) order, see as_row_col_array
        layout: Explicit input layout, see as_row_col_array

    Returns:
        Tuple of ((2, N) (row, col) keypoints, (3, N) homogeneous (u, v, 1))
    """
    points_rc = as_row_col_array(points, layout)
    return points_rc, to_homogeneous_uv(points_rc)


def from_homogeneous(points_h: np.ndarray) -> np.ndarray:
    """
    Divide by the last coordinate and drop it.

    Points at infinity (last coordinate 0) come back as inf/nan instead of raising.
    """
    points_h = np.asarray(points_h, dtype=np.float64)
    with np.errstate(divide='ignore', invalid='ignore'):
        return points_h[:-1] / points_h[-1]


def row_col_to_uv(points_rc: np.ndarray) -> np.ndarray:
    """(2, N) (row, col) -> (2, N) (u, v)."""
    return np.flipud(as_row_col_array(points_rc))


def uv_to_row_col(points_uv: np.ndarray) -> np.ndarray:
    """(2, N) (u, v) -> (2, N) (row, col)."""
    return np.flipud(as_row_col_array(points_uv))
