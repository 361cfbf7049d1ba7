#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Validity filter for triangulated points.

Points behind the camera (non-positive depth) are physically impossible for a
correspondence seen by both cameras and are dropped together with their 2D
keypoints.
"""

import logging
from typing import Tuple

import numpy as np

from stereo_init.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)


def positive_depth_mask(points_3d: np.ndarray) -> np.ndarray:
    """
    Mask of points lying in front of the camera.

    Args:
        points_3d: (3, K) points in the camera frame

    Returns:
        (K,) bool array, True where every coordinate is finite and z > 0
    """
    points_3d = np.asarray(points_3d, dtype=np.float64)
    if points_3d.ndim != 2 or points_3d.shape[0] != 3:
        raise ConfigurationError(f"3D points must have shape (3, K), got {points_3d.shape}")

    finite = np.all(np.isfinite(points_3d), axis=0)
    with np.errstate(invalid='ignore'):
        return finite & (points_3d[2] > 0)


def filter_positive_depth(points_2d: np.ndarray,
                          points_3d: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Keep only the correspondences whose 3D point has positive depth.

    The filter is stable: surviving columns keep their relative order in both arrays.

    Args:
        points_2d: (2, K) keypoints
        points_3d: (3, K) triangulated points

    Returns:
        Tuple of (filtered points_2d, filtered points_3d, (K,) bool mask)

    Raises:
        ConfigurationError: If the column counts differ
    """
    points_2d = np.asarray(points_2d)
    points_3d = np.asarray(points_3d)

    if points_2d.shape[1] != points_3d.shape[1]:
        raise ConfigurationError(
            f"2D/3D point counts differ: {points_2d.shape[1]} != {points_3d.shape[1]}")

    mask = positive_depth_mask(points_3d)
    rejected = int(np.count_nonzero(~mask))
    if rejected:
        logger.debug(f"Depth filter rejected {rejected} of {mask.size} points")

    return points_2d[:, mask], points_3d[:, mask], mask
