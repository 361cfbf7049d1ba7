#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Correspondence Service module.

Finds 2D-2D correspondences between a left and a right image by comparing
every descriptor of the left image with all descriptors of the right image.
The stereo geometry is not used: the images are not assumed rectified and the
search is not restricted to epipolar lines.

Keypoints are returned in (row, col) pixel-indexing order, which differs from
the (x, y) = (col, row) convention of OpenCV.
"""

import logging
from typing import Protocol, Tuple

import numpy as np
import cv2

from stereo_init.utils.constants import CORRESPONDENCE, VALID_DETECTORS
from stereo_init.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)


class CorrespondenceProvider(Protocol):
    """Returns index-aligned (2, N) (row, col) keypoints for an image pair."""
    def __call__(self, img_left: np.ndarray, img_right: np.ndarray) -> Tuple[np.ndarray, np.ndarray]: ...


class FeatureCorrespondenceService:
    """
    Descriptor-based correspondence search using OpenCV features and a
    brute-force matcher with Lowe's ratio test.
    """

    def __init__(self, detector: str = CORRESPONDENCE.detector,
                 max_features: int = CORRESPONDENCE.max_features,
                 ratio_test: float = CORRESPONDENCE.ratio_test,
                 cross_check: bool = CORRESPONDENCE.cross_check):
        """
        Initialize the correspondence service.

        Args:
            detector: Feature type ('sift' or 'orb')
            max_features: Maximum number of features detected per image
            ratio_test: Lowe's ratio threshold (ignored when cross_check is set)
            cross_check: Use mutual nearest neighbours instead of the ratio test
        """
        if detector not in VALID_DETECTORS:
            raise ConfigurationError(
                f"Unknown feature detector: {detector}. Available detectors: {list(VALID_DETECTORS)}")
        if not 0.0 < ratio_test <= 1.0:
            raise ConfigurationError(f"ratio_test must be in (0, 1], got {ratio_test}")

        self.detector_name = detector
        self.max_features = max_features
        self.ratio_test = ratio_test
        self.cross_check = cross_check

        if detector == "sift":
            self.detector = cv2.SIFT_create(nfeatures=max_features)
            norm_type = cv2.NORM_L2
        else:
            self.detector = cv2.ORB_create(nfeatures=max_features)
            norm_type = cv2.NORM_HAMMING

        self.matcher = cv2.BFMatcher(norm_type, crossCheck=cross_check)

        logger.info(f"Correspondence service initialized: detector={detector}, "
                    f"max_features={max_features}, ratio_test={ratio_test}, cross_check={cross_check}")

    @classmethod
    def from_settings(cls, settings: dict) -> "FeatureCorrespondenceService":
        """Create a service from a correspondence settings dictionary."""
        return cls(
            detector=settings.get("detector", CORRESPONDENCE.detector),
            max_features=settings.get("max_features", CORRESPONDENCE.max_features),
            ratio_test=settings.get("ratio_test", CORRESPONDENCE.ratio_test),
            cross_check=settings.get("cross_check", CORRESPONDENCE.cross_check),
        )

    def __call__(self, img_left: np.ndarray, img_right: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return self.find_correspondences(img_left, img_right)

    def find_correspondences(self, img_left: np.ndarray,
                             img_right: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Detect, describe and match keypoints.

        Args:
            img_left: Left image (grayscale or BGR)
            img_right: Right image (grayscale or BGR)

        Returns:
            Tuple of (2, N) float64 arrays (keypoints_left, keypoints_right) in (row, col)
        """
        kp_left, des_left = self.detector.detectAndCompute(to_grayscale(img_left), None)
        kp_right, des_right = self.detector.detectAndCompute(to_grayscale(img_right), None)

        if des_left is None or des_right is None or len(kp_left) == 0 or len(kp_right) == 0:
            logger.info("No features detected in at least one image")
            return np.zeros((2, 0)), np.zeros((2, 0))

        if self.cross_check:
            matches = self.matcher.match(des_left, des_right)
        else:
            matches = []
            for pair in self.matcher.knnMatch(des_left, des_right, k=2):
                if len(pair) == 2 and pair[0].distance < self.ratio_test * pair[1].distance:
                    matches.append(pair[0])

        logger.debug(f"{len(matches)} matches from {len(kp_left)} left / {len(kp_right)} right features")

        if not matches:
            return np.zeros((2, 0)), np.zeros((2, 0))

        # OpenCV keypoints are (x, y) = (col, row)
        xy_left = np.array([kp_left[m.queryIdx].pt for m in matches], dtype=np.float64)
        xy_right = np.array([kp_right[m.trainIdx].pt for m in matches], dtype=np.float64)

        return np.flipud(xy_left.T), np.flipud(xy_right.T)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert an image to 8-bit grayscale for feature detection.
    """
    if image is None or image.size == 0:
        raise ValueError("Invalid image: None or empty")

    if image.ndim == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

    if image.dtype != np.uint8:
        image = cv2.normalize(image, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)

    return image


def correspondences_2d2d(img_left: np.ndarray, img_right: np.ndarray,
                         **settings) -> Tuple[np.ndarray, np.ndarray]:
    """
    Find 2D-2D correspondences with a one-off FeatureCorrespondenceService.

    Args:
        img_left: Left image
        img_right: Right image
        **settings: FeatureCorrespondenceService keyword arguments

    Returns:
        Tuple of (2, N) (row, col) keypoint arrays for the left and right image
    """
    return FeatureCorrespondenceService(**settings).find_correspondences(img_left, img_right)
