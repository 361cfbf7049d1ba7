#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Stereo Initialisation Service module.

Builds the initial 2D-3D correspondence set of a visual odometry pipeline
from one stereo image pair:

    images -> correspondences (row, col) -> homogeneous (u, v, 1)
           -> triangulation -> positive-depth filter -> (points_2d, points_3d)

Points are expressed in the left camera frame (x towards the right camera,
y down in the image, z forward). Returned 2D points keep the (row, col)
convention of the correspondence provider.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

import numpy as np

from stereo_init.core.geometry.triangulation import (
    AbstractTriangulator,
    TriangulationAlgorithm,
    TriangulationFactory,
)
from stereo_init.core.geometry.validity import filter_positive_depth
from stereo_init.services.correspondence_service import CorrespondenceProvider, FeatureCorrespondenceService
from stereo_init.utils.coord_utils import adapt_keypoints
from stereo_init.utils.error_handling import ConfigurationError
from stereo_init.utils.logging_utils import StageCallback, timed_stage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InitialisationResult:
    """
    Triangulated correspondences of one stereo pair.

    Unpacks as ``points_2d, points_3d = result``.

    Attributes:
        points_2d: (2, K) left-image keypoints in (row, col) order
        points_3d: (3, K) points in the left camera frame, column-aligned with points_2d
        algorithm: Algorithm used
        validity_mask: (N,) mask over the input correspondences, True where z > 0
        depth_filter_applied: Whether points with z <= 0 were removed
        timings: Seconds spent per stage
    """
    points_2d: np.ndarray
    points_3d: np.ndarray
    algorithm: TriangulationAlgorithm
    validity_mask: np.ndarray
    depth_filter_applied: bool
    timings: Dict[str, float] = field(default_factory=dict)

    def __iter__(self):
        yield self.points_2d
        yield self.points_3d

    @property
    def num_points(self) -> int:
        return self.points_3d.shape[1]


def run_triangulation(triangulator: AbstractTriangulator,
                      keypoints_left,
                      keypoints_right,
                      apply_depth_filter: Optional[bool] = None,
                      on_stage: Optional[StageCallback] = None,
                      timings: Optional[Dict[str, float]] = None) -> InitialisationResult:
    """
    Triangulate (row, col) keypoints with an existing triangulator.

    Args:
        triangulator: Configured triangulator
        keypoints_left: (2, N) array or list of (row, col) pairs, left image
        keypoints_right: (2, N) array or list of (row, col) pairs, right image
        apply_depth_filter: Drop points with z <= 0; None uses the triangulator's default
        on_stage: Optional callback receiving (stage, seconds)
        timings: Dict collecting stage timings (a new one is created if None)

    Returns:
        InitialisationResult

    Raises:
        ConfigurationError: If the keypoint sequences differ in length or are malformed
    """
    timings = {} if timings is None else timings

    points_left_rc, points_left_h = adapt_keypoints(keypoints_left)
    _, points_right_h = adapt_keypoints(keypoints_right)

    if points_left_h.shape[1] != points_right_h.shape[1]:
        raise ConfigurationError(
            f"Correspondence sequences differ in length: left={points_left_h.shape[1]}, "
            f"right={points_right_h.shape[1]}")

    with timed_stage("triangulation", on_stage, timings):
        points_3d, validity_mask = triangulator.triangulate(points_left_h, points_right_h)

    if apply_depth_filter is None:
        apply_depth_filter = triangulator.applies_depth_filter

    if apply_depth_filter:
        with timed_stage("depth_filter", on_stage, timings, log_level=logging.DEBUG):
            points_2d, points_3d, _ = filter_positive_depth(points_left_rc, points_3d)
    else:
        points_2d = points_left_rc

    logger.info(f"{triangulator.algorithm.value}: {points_3d.shape[1]} of {validity_mask.size} "
                f"correspondences kept (depth filter {'on' if apply_depth_filter else 'off'})")

    return InitialisationResult(
        points_2d=points_2d,
        points_3d=points_3d,
        algorithm=triangulator.algorithm,
        validity_mask=validity_mask,
        depth_filter_applied=bool(apply_depth_filter),
        timings=timings,
    )


def triangulate_correspondences(keypoints_left,
                                keypoints_right,
                                K,
                                baseline: float,
                                triangulation_algorithm: Union[str, TriangulationAlgorithm],
                                apply_depth_filter: Optional[bool] = None,
                                on_stage: Optional[StageCallback] = None,
                                **triangulator_kwargs) -> InitialisationResult:
    """
    Triangulate already matched keypoints.

    Args:
        keypoints_left: Left keypoints in (row, col)
        keypoints_right: Right keypoints in (row, col), index-aligned with the left ones
        K: 3x3 intrinsic matrix shared by both cameras
        baseline: Distance between the camera centers
        triangulation_algorithm: Algorithm selector
        apply_depth_filter: Drop points with z <= 0; None uses the algorithm's default
        on_stage: Optional callback receiving (stage, seconds)
        **triangulator_kwargs: Extra triangulator parameters

    Returns:
        InitialisationResult
    """
    triangulator = TriangulationFactory.create_triangulator(
        triangulation_algorithm, K, baseline, **triangulator_kwargs)
    return run_triangulation(triangulator, keypoints_left, keypoints_right,
                             apply_depth_filter=apply_depth_filter, on_stage=on_stage)


def stereo_initialisation(img_left: np.ndarray,
                          img_right: np.ndarray,
                          K,
                          baseline: float,
                          triangulation_algorithm: Union[str, TriangulationAlgorithm],
                          correspondence_provider: Optional[CorrespondenceProvider] = None,
                          apply_depth_filter: Optional[bool] = None,
                          on_stage: Optional[StageCallback] = None,
                          **triangulator_kwargs) -> InitialisationResult:
    """
    Find and triangulate the 2D-2D correspondences of a stereo image pair.

    The algorithm and camera parameters are validated before any image work,
    so misconfiguration fails fast with ConfigurationError.

    Args:
        img_left: Image of the left camera
        img_right: Image of the right camera
        K: 3x3 intrinsic matrix, identical for both cameras
        baseline: Distance between the left and right camera
        triangulation_algorithm: 'dlt', 'least_squares_reprojection', 'disparity_ray'
                                 (or the historical names)
        correspondence_provider: Callable returning (row, col) keypoints of both
                                 images; defaults to FeatureCorrespondenceService()
        apply_depth_filter: Drop points with z <= 0; None uses the algorithm's default
        on_stage: Optional callback receiving (stage, seconds)
        **triangulator_kwargs: Extra triangulator parameters

    Returns:
        InitialisationResult, unpackable as (points_2d, points_3d)
    """
    triangulator = TriangulationFactory.create_triangulator(
        triangulation_algorithm, K, baseline, **triangulator_kwargs)

    initialiser = StereoInitialiser(triangulator,
                                    apply_depth_filter=apply_depth_filter,
                                    correspondence_provider=correspondence_provider,
                                    on_stage=on_stage)
    return initialiser.initialise(img_left, img_right)


class StereoInitialiser:
    """
    Configuration-driven stereo initialisation.

    Holds the triangulator and correspondence provider so that several image
    pairs can be processed with the same setup.
    """

    def __init__(self, triangulator: AbstractTriangulator,
                 apply_depth_filter: Optional[bool] = None,
                 correspondence_provider: Optional[CorrespondenceProvider] = None,
                 on_stage: Optional[StageCallback] = None):
        """
        Initialize the stereo initialiser.

        Args:
            triangulator: Configured triangulator
            apply_depth_filter: Drop points with z <= 0; None uses the triangulator's default
            correspondence_provider: Keypoint matcher; defaults to FeatureCorrespondenceService()
            on_stage: Optional callback receiving (stage, seconds)
        """
        self.triangulator = triangulator
        self.apply_depth_filter = apply_depth_filter
        self.correspondence_provider = correspondence_provider or FeatureCorrespondenceService()
        self.on_stage = on_stage

    @classmethod
    def from_config(cls, config_manager,
                    correspondence_provider: Optional[CorrespondenceProvider] = None,
                    on_stage: Optional[StageCallback] = None) -> "StereoInitialiser":
        """
        Create an initialiser from a ConfigManager.

        Args:
            config_manager: Source of camera, triangulation and correspondence settings
            correspondence_provider: Overrides the configured feature matcher
            on_stage: Optional callback receiving (stage, seconds)
        """
        settings = config_manager.get_triangulation_settings()
        triangulator = TriangulationFactory.create_triangulator_from_config(
            settings, config_manager.get_camera_matrix(), config_manager.get_baseline())

        if correspondence_provider is None:
            correspondence_provider = FeatureCorrespondenceService.from_settings(
                config_manager.get_correspondence_settings())

        return cls(triangulator,
                   apply_depth_filter=settings.get("apply_depth_filter"),
                   correspondence_provider=correspondence_provider,
                   on_stage=on_stage)

    @property
    def algorithm(self) -> TriangulationAlgorithm:
        return self.triangulator.algorithm

    def initialise(self, img_left: np.ndarray, img_right: np.ndarray) -> InitialisationResult:
        """Match and triangulate one stereo pair."""
        timings = {}
        with timed_stage("correspondences", self.on_stage, timings):
            keypoints_left, keypoints_right = self.correspondence_provider(img_left, img_right)

        return self.triangulate(keypoints_left, keypoints_right, timings=timings)

    def triangulate(self, keypoints_left, keypoints_right,
                    timings: Optional[Dict[str, float]] = None) -> InitialisationResult:
        """Triangulate already matched keypoints."""
        return run_triangulation(self.triangulator, keypoints_left, keypoints_right,
                                 apply_depth_filter=self.apply_depth_filter,
                                 on_stage=self.on_stage, timings=timings)
