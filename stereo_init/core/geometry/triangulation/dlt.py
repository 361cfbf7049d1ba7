#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Direct Linear Transform (DLT) triangulation implementation.
"""

import logging
from typing import Tuple

import numpy as np

from stereo_init.core.geometry.triangulation.base import AbstractTriangulator, TriangulationAlgorithm
from stereo_init.core.geometry.triangulation.utils import dehomogenize

logger = logging.getLogger(__name__)


class DLTTriangulator(AbstractTriangulator):
    """
    Direct Linear Transform (DLT) triangulator implementation.

    Each view contributes two rows of the cross product p x (P X) = 0, giving
    a 4x4 homogeneous system. The solution is the right singular vector of the
    smallest singular value, dehomogenized.
    """

    algorithm = TriangulationAlgorithm.DLT
    applies_depth_filter = True

    def _triangulate_single(self, point_left: np.ndarray,
                            point_right: np.ndarray) -> Tuple[np.ndarray, bool]:
        A = self._build_system(point_left, point_right)

        # Solve the system of equations using SVD
        _, singular_values, Vt = np.linalg.svd(A)

        # The solution is the last row of Vt (corresponding to smallest singular value)
        X = Vt[-1, :]

        # A second near-zero singular value means the null space is not unique
        well_conditioned = (
            singular_values[0] > 0
            and singular_values[-2] * self.condition_threshold > singular_values[0]
            and abs(X[3]) > np.finfo(np.float64).eps
        )
        if not well_conditioned:
            logger.debug(f"DLT system is rank deficient, singular values: {singular_values}")

        return dehomogenize(X), well_conditioned

    def _build_system(self, point_left: np.ndarray, point_right: np.ndarray) -> np.ndarray:
        """
        Construct the DLT matrix (4 equations from 2 homogeneous points).
        """
        A = np.zeros((4, 4), dtype=np.float64)

        # Left camera equations
        A[0, :] = point_left[0] * self.P_left[2, :] - point_left[2] * self.P_left[0, :]
        A[1, :] = point_left[1] * self.P_left[2, :] - point_left[2] * self.P_left[1, :]

        # Right camera equations
        A[2, :] = point_right[0] * self.P_right[2, :] - point_right[2] * self.P_right[0, :]
        A[3, :] = point_right[1] * self.P_right[2, :] - point_right[2] * self.P_right[1, :]

        return A
