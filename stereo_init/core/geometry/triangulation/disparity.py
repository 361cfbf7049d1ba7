#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Disparity-ray triangulation.

Uses the translation-only stereo geometry directly: the left and right pixels
are back-projected to rays r_l = K^-1 p_l and r_r = K^-1 p_r, and the ray
scales solve

    lambda_l * r_l - lambda_r * r_r = [baseline, 0, 0]

in the least-squares sense through the normal equations. The point is
lambda_l * r_l. Only valid when there is no rotation between the cameras.
"""

import logging
from typing import Tuple

import numpy as np

from stereo_init.core.geometry.triangulation.base import AbstractTriangulator, TriangulationAlgorithm
from stereo_init.core.geometry.triangulation.utils import is_ill_conditioned

logger = logging.getLogger(__name__)


class DisparityRayTriangulator(AbstractTriangulator):
    """
    Ray-intersection triangulator for a rectilinear stereo rig.

    Historically this variant does not drop points behind the camera, so the
    depth filter is off by default; callers can still request it.
    """

    algorithm = TriangulationAlgorithm.DISPARITY_RAY
    applies_depth_filter = False

    def set_camera_parameters(self, camera_matrix, baseline: float) -> None:
        super().set_camera_parameters(camera_matrix, baseline)
        self.camera_matrix_inv = np.linalg.inv(self.camera_matrix)
        self.baseline_vector = np.array([self.baseline, 0.0, 0.0])

    def _triangulate_single(self, point_left: np.ndarray,
                            point_right: np.ndarray) -> Tuple[np.ndarray, bool]:
        ray_left = self.camera_matrix_inv @ point_left
        ray_right = self.camera_matrix_inv @ point_right

        A = np.column_stack((ray_left, -ray_right))
        AtA = A.T @ A
        Atb = A.T @ self.baseline_vector

        if is_ill_conditioned(AtA, self.condition_threshold):
            # Parallel rays: take the minimum-norm least-squares scales
            scales, _, _, _ = np.linalg.lstsq(A, self.baseline_vector, rcond=None)
            return scales[0] * ray_left, False

        scales = np.linalg.solve(AtA, Atb)
        return scales[0] * ray_left, True

    def depth_from_disparity(self, disparity: np.ndarray) -> np.ndarray:
        """
        Closed-form depth f_x * baseline / disparity for rectified pixels.

        Zero disparity maps to inf.
        """
        disparity = np.asarray(disparity, dtype=np.float64)
        with np.errstate(divide='ignore'):
            return self.camera_matrix[0, 0] * self.baseline / disparity
