#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Stereo initialisation for visual odometry.

Recovers 3D landmarks in the left camera frame from matched keypoints of a
calibrated, translation-only stereo pair.
"""

from stereo_init.core.geometry.triangulation import (
    TriangulationAlgorithm,
    TriangulationFactory,
    DLTTriangulator,
    LeastSquaresReprojectionTriangulator,
    DisparityRayTriangulator,
)
from stereo_init.services.initialisation_service import (
    InitialisationResult,
    StereoInitialiser,
    stereo_initialisation,
    triangulate_correspondences,
)
from stereo_init.utils.error_handling import (
    StereoInitError,
    ConfigurationError,
    DegenerateGeometryWarning,
)

__version__ = "0.1.0"

__all__ = [
    'TriangulationAlgorithm',
    'TriangulationFactory',
    'DLTTriangulator',
    'LeastSquaresReprojectionTriangulator',
    'DisparityRayTriangulator',
    'InitialisationResult',
    'StereoInitialiser',
    'stereo_initialisation',
    'triangulate_correspondences',
    'StereoInitError',
    'ConfigurationError',
    'DegenerateGeometryWarning',
]
