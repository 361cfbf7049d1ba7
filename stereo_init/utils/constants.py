#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Universal Constants Module for stereo initialisation.
This file centralizes default parameters used across the package.
"""

from dataclasses import dataclass, field
from typing import List, Optional


# =============================================
# Camera Constants
# =============================================

@dataclass
class CAMERA:
    """Default stereo rig (identical intrinsics for both cameras)"""
    camera_matrix: List[List[float]] = field(default_factory=lambda: [
        [700.0, 0.0, 320.0],
        [0.0, 700.0, 240.0],
        [0.0, 0.0, 1.0],
    ])
    baseline_m: float = 0.5


# =============================================
# Triangulation Constants
# =============================================

@dataclass
class TRIANGULATION:
    """Triangulation engine parameters"""
    algorithm: str = "dlt"
    # None keeps each algorithm's own default (on for dlt / least squares, off for disparity ray)
    apply_depth_filter: Optional[bool] = None
    # scipy.optimize.least_squares settings for the reprojection refinement
    optimization_method: str = "lm"
    ftol: float = 1e-10
    xtol: float = 1e-10
    max_nfev: int = 100
    # Condition number above which a per-point solve is reported as degenerate
    condition_threshold: float = 1e12


# =============================================
# Correspondence Constants
# =============================================

@dataclass
class CORRESPONDENCE:
    """Feature detection and matching parameters"""
    detector: str = "sift"
    max_features: int = 2000
    ratio_test: float = 0.75  # Lowe's ratio
    cross_check: bool = False


VALID_DETECTORS = ("sift", "orb")
VALID_OPTIMIZATION_METHODS = ("lm", "trf", "dogbox")
