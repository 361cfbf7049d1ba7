#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Triangulation factory module.

This module provides a factory class for creating triangulator instances
based on the selected algorithm and parameters.
"""

import logging
from typing import Dict, Any, Optional, Union

from stereo_init.core.geometry.triangulation.base import AbstractTriangulator, TriangulationAlgorithm
from stereo_init.core.geometry.triangulation.dlt import DLTTriangulator
from stereo_init.core.geometry.triangulation.least_squares import LeastSquaresReprojectionTriangulator
from stereo_init.core.geometry.triangulation.disparity import DisparityRayTriangulator
from stereo_init.utils.constants import TRIANGULATION
from stereo_init.utils.logging_utils import log_service_init

logger = logging.getLogger(__name__)


class TriangulationFactory:
    """
    Factory class for creating triangulator instances.

    Every algorithm must be mapped explicitly; an unknown selector raises
    ConfigurationError instead of falling back to a default.
    """

    TRIANGULATORS = {
        TriangulationAlgorithm.DLT: DLTTriangulator,
        TriangulationAlgorithm.LEAST_SQUARES_REPROJECTION: LeastSquaresReprojectionTriangulator,
        TriangulationAlgorithm.DISPARITY_RAY: DisparityRayTriangulator,
    }

    @staticmethod
    def create_triangulator(algorithm: Union[str, TriangulationAlgorithm],
                            camera_matrix,
                            baseline: float,
                            **kwargs) -> AbstractTriangulator:
        """
        Create a triangulator instance for the specified algorithm.

        Args:
            algorithm: Algorithm selector ('dlt', 'least_squares_reprojection',
                       'disparity_ray' or a TriangulationAlgorithm member)
            camera_matrix: 3x3 intrinsic matrix shared by both cameras
            baseline: Distance between the camera centers
            **kwargs: Additional parameters for specific triangulator types
                      (e.g. optimization_method for least squares)

        Returns:
            AbstractTriangulator instance

        Raises:
            ConfigurationError: If the algorithm or its parameters are invalid
        """
        algorithm = TriangulationAlgorithm.from_name(algorithm)
        triangulator = TriangulationFactory.TRIANGULATORS[algorithm](camera_matrix, baseline, **kwargs)

        log_service_init(triangulator.__class__.__name__, triangulator.get_settings(),
                         log_level=logging.DEBUG)
        return triangulator

    @staticmethod
    def create_triangulator_from_config(config: Dict[str, Any],
                                        camera_matrix,
                                        baseline: float,
                                        algorithm: Optional[Union[str, TriangulationAlgorithm]] = None
                                        ) -> AbstractTriangulator:
        """
        Create a triangulator from a triangulation settings dictionary.

        Args:
            config: Triangulation settings (algorithm, condition_threshold and,
                    for least squares, optimization_method / ftol / xtol / max_nfev)
            camera_matrix: 3x3 intrinsic matrix shared by both cameras
            baseline: Distance between the camera centers
            algorithm: Overrides config['algorithm'] when given

        Returns:
            AbstractTriangulator instance
        """
        algorithm = TriangulationAlgorithm.from_name(
            algorithm if algorithm is not None else config.get('algorithm', TRIANGULATION.algorithm))

        kwargs = {
            'condition_threshold': config.get('condition_threshold', TRIANGULATION.condition_threshold),
        }

        if algorithm == TriangulationAlgorithm.LEAST_SQUARES_REPROJECTION:
            kwargs['optimization_method'] = config.get('optimization_method', TRIANGULATION.optimization_method)
            kwargs['ftol'] = config.get('ftol', TRIANGULATION.ftol)
            kwargs['xtol'] = config.get('xtol', TRIANGULATION.xtol)
            kwargs['max_nfev'] = config.get('max_nfev', TRIANGULATION.max_nfev)

        return TriangulationFactory.create_triangulator(algorithm, camera_matrix, baseline, **kwargs)
