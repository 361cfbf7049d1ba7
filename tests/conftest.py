#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Shared fixtures: a reference stereo rig and synthetic correspondences.
"""

import sys
from pathlib import Path

import pytest
import numpy as np

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


@pytest.fixture
def camera_matrix():
    """Intrinsics of the reference rig."""
    return np.array([
        [700.0, 0.0, 320.0],
        [0.0, 700.0, 240.0],
        [0.0, 0.0, 1.0],
    ])


@pytest.fixture
def baseline():
    """Baseline of the reference rig in meters."""
    return 0.5


@pytest.fixture
def project_stereo():
    """
    Return a function projecting (3, N) left-camera points into both images.

    The function returns (keypoints_left, keypoints_right) in (row, col) order.
    """
    def project(points_3d, K, baseline):
        points_3d = np.asarray(points_3d, dtype=np.float64)
        right_points = points_3d - np.array([[baseline], [0.0], [0.0]])

        uvw_left = K @ points_3d
        uvw_right = K @ right_points
        uv_left = uvw_left[:2] / uvw_left[2]
        uv_right = uvw_right[:2] / uvw_right[2]

        return np.flipud(uv_left), np.flipud(uv_right)

    return project


@pytest.fixture
def random_points():
    """(3, 30) points in front of the rig, fixed seed."""
    rng = np.random.default_rng(42)
    n_points = 30
    return np.vstack((
        rng.uniform(-4.0, 4.0, n_points),
        rng.uniform(-3.0, 3.0, n_points),
        rng.uniform(2.0, 40.0, n_points),
    ))


@pytest.fixture
def scenario_keypoints():
    """One correspondence with a 32 px disparity, in (row, col)."""
    return np.array([[240.0], [320.0]]), np.array([[240.0], [288.0]])
