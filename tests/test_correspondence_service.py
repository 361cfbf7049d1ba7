#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Unit tests for the correspondence service.
"""

import unittest

import numpy as np
import cv2

from stereo_init.services.correspondence_service import (
    FeatureCorrespondenceService,
    correspondences_2d2d,
    to_grayscale,
)
from stereo_init.utils.error_handling import ConfigurationError


def textured_pair(shift: int = 8):
    """Blurred noise and a copy whose content is moved ``shift`` px to the left."""
    rng = np.random.default_rng(0)
    noise = rng.integers(0, 256, (240, 320), dtype=np.uint8)
    left = cv2.GaussianBlur(noise, (5, 5), 1.5)
    right = np.roll(left, -shift, axis=1)
    return left, right


class TestCorrespondenceService(unittest.TestCase):
    """Test suite for the correspondence service."""

    def test_sift_matches_follow_shift(self):
        """Matches are (row, col) and the column offset equals the shift."""
        left, right = textured_pair(shift=8)
        keypoints_left, keypoints_right = FeatureCorrespondenceService(detector="sift").find_correspondences(left, right)

        self.assertEqual(keypoints_left.shape[0], 2)
        self.assertEqual(keypoints_left.shape, keypoints_right.shape)
        self.assertGreater(keypoints_left.shape[1], 10)

        # Rows agree and columns differ by the shift for the bulk of the matches
        self.assertAlmostEqual(float(np.median(keypoints_left[0] - keypoints_right[0])), 0.0, delta=0.5)
        self.assertAlmostEqual(float(np.median(keypoints_left[1] - keypoints_right[1])), 8.0, delta=0.5)

    def test_orb_cross_check(self):
        """ORB with mutual matching returns index-aligned arrays."""
        left, right = textured_pair(shift=5)
        keypoints_left, keypoints_right = correspondences_2d2d(left, right, detector="orb", cross_check=True)

        self.assertEqual(keypoints_left.shape, keypoints_right.shape)
        self.assertEqual(keypoints_left.shape[0], 2)

    def test_featureless_images(self):
        """Blank images produce no correspondences."""
        blank = np.zeros((120, 160), dtype=np.uint8)
        keypoints_left, keypoints_right = FeatureCorrespondenceService()(blank, blank)

        self.assertEqual(keypoints_left.shape, (2, 0))
        self.assertEqual(keypoints_right.shape, (2, 0))

    def test_color_images(self):
        """BGR input is converted before detection."""
        left, right = textured_pair()
        keypoints_left, _ = FeatureCorrespondenceService().find_correspondences(
            cv2.cvtColor(left, cv2.COLOR_GRAY2BGR), cv2.cvtColor(right, cv2.COLOR_GRAY2BGR))
        self.assertGreater(keypoints_left.shape[1], 0)

    def test_invalid_settings(self):
        with self.assertRaises(ConfigurationError):
            FeatureCorrespondenceService(detector="surf")
        with self.assertRaises(ConfigurationError):
            FeatureCorrespondenceService(ratio_test=1.5)

    def test_from_settings(self):
        service = FeatureCorrespondenceService.from_settings({"detector": "orb", "max_features": 100})
        self.assertEqual(service.detector_name, "orb")
        self.assertEqual(service.max_features, 100)
        self.assertEqual(service.ratio_test, 0.75)

    def test_to_grayscale(self):
        """Float images are rescaled to uint8."""
        image = np.linspace(0.0, 1.0, 100, dtype=np.float32).reshape(10, 10)
        gray = to_grayscale(image)
        self.assertEqual(gray.dtype, np.uint8)
        self.assertEqual(gray.max(), 255)

        with self.assertRaises(ValueError):
            to_grayscale(np.zeros((0, 0), dtype=np.uint8))


if __name__ == '__main__':
    unittest.main()
