#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Triangulation utility functions.

This module provides common utility functions for triangulation operations:
stereo projection matrices, input validation, dehomogenization,
reprojection error and conditioning checks.
"""

import logging
from typing import List, Tuple

import numpy as np

from stereo_init.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)


def validate_camera_matrix(camera_matrix) -> np.ndarray:
    """
    Validate and convert an intrinsic matrix.

    Args:
        camera_matrix: 3x3 intrinsic matrix (array-like)

    Returns:
        3x3 float64 array

    Raises:
        ConfigurationError: If the matrix is not 3x3, not finite or singular
    """
    try:
        K = np.array(camera_matrix, dtype=np.float64)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Invalid camera matrix: {e}") from e

    if K.shape != (3, 3):
        raise ConfigurationError(f"Camera matrix must be 3x3, got shape {K.shape}")

    if not np.all(np.isfinite(K)):
        raise ConfigurationError("Camera matrix contains non-finite values")

    if abs(np.linalg.det(K)) < 1e-12:
        raise ConfigurationError("Camera matrix is singular")

    return K


def validate_baseline(baseline) -> float:
    """
    Validate the stereo baseline.

    A zero baseline is accepted; it makes triangulation degenerate but is
    handled numerically rather than rejected.
    """
    try:
        value = float(baseline)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Baseline must be a scalar, got {baseline!r}") from e

    if not np.isfinite(value):
        raise ConfigurationError(f"Baseline must be finite, got {value}")

    if value == 0.0:
        logger.warning("Zero baseline: triangulation is degenerate for every correspondence")

    return value


def validate_homogeneous_pair(points_left: np.ndarray,
                              points_right: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Check that two homogeneous point sets are (3, N) with the same N.

    Raises:
        ConfigurationError: On wrong shapes or mismatched counts
    """
    points_left = np.asarray(points_left, dtype=np.float64)
    points_right = np.asarray(points_right, dtype=np.float64)

    for name, points in (("left", points_left), ("right", points_right)):
        if points.ndim != 2 or points.shape[0] != 3:
            raise ConfigurationError(
                f"{name} points must be homogeneous with shape (3, N), got {points.shape}")

    if points_left.shape[1] != points_right.shape[1]:
        raise ConfigurationError(
            f"Mismatched correspondence counts: left={points_left.shape[1]}, "
            f"right={points_right.shape[1]}")

    return points_left, points_right


def create_stereo_projection_matrices(camera_matrix: np.ndarray,
                                      baseline: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Create the projection matrices of a translation-only stereo rig.

    The world frame is the left camera frame and the right camera sits
    ``baseline`` along the left camera's x axis.

    Args:
        camera_matrix: 3x3 intrinsic matrix shared by both cameras
        baseline: Distance between the camera centers

    Returns:
        Tuple (P_left, P_right) of 3x4 matrices, K[I|0] and K[I|-b*e_x]
    """
    P_left = camera_matrix @ np.hstack((np.eye(3), np.zeros((3, 1))))
    P_right = camera_matrix @ np.hstack((np.eye(3), np.array([[-baseline], [0.0], [0.0]])))
    return P_left, P_right


def dehomogenize(point_h: np.ndarray) -> np.ndarray:
    """
    Convert a homogeneous 4-vector to a Euclidean 3-vector.

    A zero last component yields inf/nan without raising.
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        return point_h[:3] / point_h[3]


def project_point(point_3d: np.ndarray, projection_matrix: np.ndarray) -> np.ndarray:
    """
    Project a 3D point to (u, v) pixel coordinates.
    """
    projected = projection_matrix @ np.append(point_3d, 1.0)
    with np.errstate(divide='ignore', invalid='ignore'):
        return projected[:2] / projected[2]


def calculate_reprojection_error(point_3d: np.ndarray,
                                 points_2d: List[np.ndarray],
                                 projection_matrices: List[np.ndarray]) -> float:
    """
    Calculate the mean reprojection error for a triangulated 3D point.

    Args:
        point_3d: 3D point [X, Y, Z]
        points_2d: Observed points, (u, v) or homogeneous (u, v, w), one per view
        projection_matrices: Projection matrix for each view

    Returns:
        Mean Euclidean reprojection error in pixels
    """
    total_error = 0.0

    for point_2d, projection_matrix in zip(points_2d, projection_matrices):
        observed = np.asarray(point_2d, dtype=np.float64)
        if observed.shape[0] == 3:
            observed = observed[:2] / observed[2]
        total_error += np.linalg.norm(observed - project_point(point_3d, projection_matrix))

    return total_error / len(points_2d)


def is_ill_conditioned(matrix: np.ndarray, threshold: float) -> bool:
    """
    Check whether a linear system is too badly conditioned to trust.

    Returns True for singular matrices (infinite condition number).
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        condition = np.linalg.cond(matrix)
    return not np.isfinite(condition) or condition > threshold
