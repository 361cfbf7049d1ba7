#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Abstract triangulation base module.
"""

import enum
import logging
import warnings
from abc import ABC, abstractmethod
from typing import Dict, Any, Tuple, Union

import numpy as np

from stereo_init.core.geometry.triangulation.utils import (
    validate_camera_matrix,
    validate_baseline,
    validate_homogeneous_pair,
    create_stereo_projection_matrices,
    calculate_reprojection_error,
)
from stereo_init.core.geometry.validity import positive_depth_mask
from stereo_init.utils.constants import TRIANGULATION
from stereo_init.utils.error_handling import ConfigurationError, DegenerateGeometryWarning

logger = logging.getLogger(__name__)


class TriangulationAlgorithm(enum.Enum):
    """Selectable triangulation algorithms."""
    DLT = "dlt"
    LEAST_SQUARES_REPROJECTION = "least_squares_reprojection"
    DISPARITY_RAY = "disparity_ray"

    @classmethod
    def from_name(cls, name: Union[str, "TriangulationAlgorithm"]) -> "TriangulationAlgorithm":
        """
        Resolve an algorithm selector.

        Accepts a member, its value, its member name (case-insensitive) or one
        of the historical names. There is no fallback algorithm.

        Raises:
            ConfigurationError: If the selector is not recognized
        """
        if isinstance(name, cls):
            return name

        if isinstance(name, str):
            key = name.strip().lower()
            for member in cls:
                if key in (member.value, member.name.lower()):
                    return member
            if key in LEGACY_ALGORITHM_NAMES:
                return LEGACY_ALGORITHM_NAMES[key]

        valid = [member.value for member in cls] + list(LEGACY_ALGORITHM_NAMES)
        raise ConfigurationError(
            f"Unknown triangulation algorithm: {name!r}. Valid choices: {valid}")


# Names used by earlier versions of the pipeline
LEGACY_ALGORITHM_NAMES = {
    "ex_5_triangulation": TriangulationAlgorithm.DLT,
    "matlab_triangulation": TriangulationAlgorithm.LEAST_SQUARES_REPROJECTION,
    "disparity_triangulation": TriangulationAlgorithm.DISPARITY_RAY,
}


class AbstractTriangulator(ABC):
    """
    Abstract base class for stereo triangulation implementations.

    The rig is a calibrated, translation-only stereo pair: both cameras share
    the intrinsic matrix K and the right camera sits ``baseline`` along the
    left camera's x axis. Points are returned in the left camera frame.

    Subclasses implement ``_triangulate_single`` for one correspondence and
    declare whether the positive-depth filter applies to their output by default.
    """

    algorithm: TriangulationAlgorithm = None
    applies_depth_filter: bool = True

    def __init__(self, camera_matrix, baseline: float,
                 condition_threshold: float = TRIANGULATION.condition_threshold):
        """
        Initialize the triangulator.

        Args:
            camera_matrix: 3x3 intrinsic matrix shared by both cameras
            baseline: Distance between the camera centers along the left x axis
            condition_threshold: Condition number above which a solve is degenerate
        """
        if condition_threshold <= 0:
            raise ConfigurationError(f"condition_threshold must be positive, got {condition_threshold}")
        self.condition_threshold = float(condition_threshold)
        self.set_camera_parameters(camera_matrix, baseline)

    def set_camera_parameters(self, camera_matrix, baseline: float) -> None:
        """
        Set camera parameters and rebuild the projection matrices.

        Raises:
            ConfigurationError: If K is not a valid 3x3 matrix or the baseline is not finite
        """
        self.camera_matrix = validate_camera_matrix(camera_matrix)
        self.baseline = validate_baseline(baseline)
        self.P_left, self.P_right = create_stereo_projection_matrices(self.camera_matrix, self.baseline)

    def triangulate(self, points_left: np.ndarray,
                    points_right: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Triangulate all correspondences.

        Args:
            points_left: (3, N) homogeneous (u, v, 1) points in the left image
            points_right: (3, N) homogeneous (u, v, 1) points in the right image

        Returns:
            Tuple of ((3, N) points in the left camera frame, (N,) bool mask of
            points with finite, strictly positive depth)

        Raises:
            ConfigurationError: On malformed inputs or mismatched counts
        """
        points_left, points_right = validate_homogeneous_pair(points_left, points_right)
        n_points = points_left.shape[1]

        points_3d = np.zeros((3, n_points), dtype=np.float64)
        degenerate = 0

        for i in range(n_points):
            point_left = points_left[:, i]
            point_right = points_right[:, i]

            # Skip if any coordinate is NaN or infinite
            if not (np.all(np.isfinite(point_left)) and np.all(np.isfinite(point_right))):
                logger.debug(f"Correspondence {i} has non-finite coordinates, skipped")
                points_3d[:, i] = np.nan
                continue

            point_3d, well_conditioned = self._triangulate_single(point_left, point_right)
            points_3d[:, i] = point_3d
            if not well_conditioned:
                degenerate += 1

        if degenerate:
            self._report_degenerate(degenerate, n_points)

        return points_3d, positive_depth_mask(points_3d)

    def triangulate_point(self, point_left: np.ndarray, point_right: np.ndarray) -> np.ndarray:
        """
        Triangulate a single correspondence.

        Args:
            point_left: Homogeneous (u, v, 1) point in the left image
            point_right: Homogeneous (u, v, 1) point in the right image

        Returns:
            3D point [X, Y, Z] in the left camera frame
        """
        points_3d, _ = self.triangulate(np.reshape(point_left, (3, 1)),
                                        np.reshape(point_right, (3, 1)))
        return points_3d[:, 0]

    @abstractmethod
    def _triangulate_single(self, point_left: np.ndarray,
                            point_right: np.ndarray) -> Tuple[np.ndarray, bool]:
        """
        Triangulate one correspondence.

        Returns:
            Tuple of (3D point, False if the solve was singular or ill-conditioned)
        """

    def calculate_reprojection_error(self, point_3d: np.ndarray,
                                     point_left: np.ndarray,
                                     point_right: np.ndarray) -> float:
        """
        Calculate the mean reprojection error in pixels over both views.
        """
        return calculate_reprojection_error(
            point_3d, [point_left, point_right], [self.P_left, self.P_right])

    def get_projection_matrices(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Get the projection matrices for left and right cameras.

        Returns:
            Tuple of (left_projection_matrix, right_projection_matrix)
        """
        return self.P_left, self.P_right

    def get_settings(self) -> Dict[str, Any]:
        """Settings summary used for logging."""
        return {
            "algorithm": self.algorithm.value if self.algorithm else None,
            "baseline": self.baseline,
            "applies_depth_filter": self.applies_depth_filter,
            "condition_threshold": self.condition_threshold,
        }

    def _report_degenerate(self, degenerate: int, n_points: int) -> None:
        message = (f"{self.__class__.__name__}: {degenerate} of {n_points} correspondences "
                   f"had a near-singular solve; returning least-squares estimates")
        logger.warning(message)
        warnings.warn(message, DegenerateGeometryWarning, stacklevel=3)
