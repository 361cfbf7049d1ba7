#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Triangulation package initialization.

This package provides the stereo triangulation algorithms: direct linear
transform, least-squares reprojection and disparity-ray triangulation.
"""

from stereo_init.core.geometry.triangulation.base import AbstractTriangulator, TriangulationAlgorithm
from stereo_init.core.geometry.triangulation.dlt import DLTTriangulator
from stereo_init.core.geometry.triangulation.least_squares import LeastSquaresReprojectionTriangulator
from stereo_init.core.geometry.triangulation.disparity import DisparityRayTriangulator
from stereo_init.core.geometry.triangulation.factory import TriangulationFactory
import stereo_init.core.geometry.triangulation.utils as triangulation_utils

__all__ = [
    'AbstractTriangulator',
    'TriangulationAlgorithm',
    'DLTTriangulator',
    'LeastSquaresReprojectionTriangulator',
    'DisparityRayTriangulator',
    'TriangulationFactory',
    'triangulation_utils',
]
