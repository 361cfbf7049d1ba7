#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Least-squares reprojection triangulation module.

This module triangulates each correspondence by minimizing the reprojection
residuals in both images. The starting point comes from the inhomogeneous
linear least-squares solution of the projection equations, which is then
refined with scipy's nonlinear least-squares solver. On noisy data the result
differs from the DLT null-space solution.
"""

import logging
from typing import Tuple

import numpy as np
from scipy import optimize

from stereo_init.core.geometry.triangulation.base import AbstractTriangulator, TriangulationAlgorithm
from stereo_init.core.geometry.triangulation.utils import is_ill_conditioned, project_point
from stereo_init.utils.constants import TRIANGULATION, VALID_OPTIMIZATION_METHODS
from stereo_init.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)


class LeastSquaresReprojectionTriangulator(AbstractTriangulator):
    """
    Triangulator minimizing the reprojection error of each point.
    """

    algorithm = TriangulationAlgorithm.LEAST_SQUARES_REPROJECTION
    applies_depth_filter = True

    def __init__(self, camera_matrix, baseline: float,
                 condition_threshold: float = TRIANGULATION.condition_threshold,
                 optimization_method: str = TRIANGULATION.optimization_method,
                 ftol: float = TRIANGULATION.ftol,
                 xtol: float = TRIANGULATION.xtol,
                 max_nfev: int = TRIANGULATION.max_nfev):
        """
        Initialize the least-squares triangulator.

        Args:
            camera_matrix: 3x3 intrinsic matrix shared by both cameras
            baseline: Distance between the camera centers
            condition_threshold: Condition number above which a solve is degenerate
            optimization_method: scipy.optimize.least_squares method ('lm', 'trf', 'dogbox')
            ftol: Tolerance on the change of the cost function
            xtol: Tolerance on the change of the point
            max_nfev: Maximum number of residual evaluations per point
        """
        if optimization_method not in VALID_OPTIMIZATION_METHODS:
            raise ConfigurationError(
                f"Unknown optimization method: {optimization_method}. "
                f"Available methods: {list(VALID_OPTIMIZATION_METHODS)}")
        if max_nfev < 1:
            raise ConfigurationError(f"max_nfev must be at least 1, got {max_nfev}")

        super().__init__(camera_matrix, baseline, condition_threshold)
        self.optimization_method = optimization_method
        self.ftol = ftol
        self.xtol = xtol
        self.max_nfev = max_nfev

    def get_settings(self):
        settings = super().get_settings()
        settings.update({
            "optimization_method": self.optimization_method,
            "ftol": self.ftol,
            "xtol": self.xtol,
            "max_nfev": self.max_nfev,
        })
        return settings

    def _triangulate_single(self, point_left: np.ndarray,
                            point_right: np.ndarray) -> Tuple[np.ndarray, bool]:
        if point_left[2] == 0 or point_right[2] == 0:
            return np.full(3, np.nan), False

        observed = [point_left[:2] / point_left[2], point_right[:2] / point_right[2]]

        initial_point, well_conditioned = self._linear_estimate(observed)

        # Residuals are undefined for points on the camera plane (z = 0)
        initial_residuals = self._reprojection_residuals(initial_point, observed)
        if not np.all(np.isfinite(initial_residuals)):
            logger.debug("Initial estimate projects to infinity, skipping refinement")
            return initial_point, False

        return self._refine_point(initial_point, observed), well_conditioned

    def _linear_estimate(self, observed) -> Tuple[np.ndarray, bool]:
        """
        Solve the projection equations for X = [x, y, z] with w fixed to 1.

        Returns:
            Tuple of (least-squares point, False if the system is ill-conditioned)
        """
        rows = []
        for (u, v), P in zip(observed, (self.P_left, self.P_right)):
            rows.append(u * P[2] - P[0])
            rows.append(v * P[2] - P[1])
        A = np.array(rows)

        point, _, _, _ = np.linalg.lstsq(A[:, :3], -A[:, 3], rcond=None)
        return point, not is_ill_conditioned(A[:, :3], self.condition_threshold)

    def _refine_point(self, initial_point: np.ndarray, observed) -> np.ndarray:
        """
        Refine a 3D point using nonlinear optimization of the reprojection error.
        """
        result = optimize.least_squares(
            self._reprojection_residuals,
            initial_point,
            args=(observed,),
            method=self.optimization_method,
            ftol=self.ftol,
            xtol=self.xtol,
            max_nfev=self.max_nfev,
        )

        if not np.all(np.isfinite(result.x)):
            logger.debug(f"Refinement diverged ({result.message}), keeping linear estimate")
            return initial_point

        return result.x

    def _reprojection_residuals(self, point_3d: np.ndarray, observed) -> np.ndarray:
        """
        Pixel residuals (u, v) of both views, flattened to 4 values.
        """
        projected_left = project_point(point_3d, self.P_left)
        projected_right = project_point(point_3d, self.P_right)
        return np.concatenate((projected_left - observed[0], projected_right - observed[1]))
