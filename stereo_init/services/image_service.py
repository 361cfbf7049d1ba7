#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Image Service module.
Loads frames of an image dataset stored as a flat folder of files.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import cv2

from stereo_init.utils.error_handling import handle_errors, ErrorAction

logger = logging.getLogger(__name__)


def list_dataset_images(dataset_path: Union[str, Path], pattern: str = "*.jpg") -> List[Path]:
    """
    List the images of a dataset folder in name order.

    Args:
        dataset_path: Folder containing the images
        pattern: Glob pattern of the image files

    Returns:
        Sorted list of image paths
    """
    return sorted(Path(dataset_path).glob(pattern))


@handle_errors(
    action=ErrorAction.RETURN_DEFAULT,
    default_return=None,
    message="Error loading dataset image: {error}",
    exception_types=(OSError, cv2.error)
)
def load_dataset_image(dataset_path: Union[str, Path], index: int,
                       pattern: str = "*.jpg", grayscale: bool = False) -> Optional[np.ndarray]:
    """
    Load the image at ``index`` (0-based) in the name-sorted dataset folder.

    Args:
        dataset_path: Folder containing the images
        index: Position of the image in the sorted file list
        pattern: Glob pattern of the image files
        grayscale: Decode as single-channel image

    Returns:
        Decoded image, or None if the file cannot be read

    Raises:
        IndexError: If index is outside the dataset
    """
    image_paths = list_dataset_images(dataset_path, pattern)
    if not 0 <= index < len(image_paths):
        raise IndexError(f"Image index {index} out of range for {len(image_paths)} images in {dataset_path}")

    image_path = image_paths[index]
    flags = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_COLOR
    image = cv2.imread(str(image_path), flags)

    if image is None:
        raise OSError(f"Could not decode {image_path}")

    logger.debug(f"Loaded {image_path} with shape {image.shape}")
    return image
