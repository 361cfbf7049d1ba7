#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Configuration Manager module.
This module contains the ConfigManager class for managing stereo initialisation configuration.
"""

import copy
import json
import logging
from pathlib import Path

import numpy as np

from stereo_init.utils.constants import CAMERA, TRIANGULATION, CORRESPONDENCE
from stereo_init.utils.error_handling import handle_errors, ErrorAction

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Configuration manager for stereo initialisation.
    Manages loading and saving configuration to a JSON file.
    """

    def __init__(self, config_file="stereo_init.json"):
        """
        Initialize the configuration manager.

        Args:
            config_file (str): Path to the configuration file
        """
        camera = CAMERA()
        triangulation = TRIANGULATION()
        correspondence = CORRESPONDENCE()

        # Default configuration
        self.default_config = {
            "camera_settings": {
                "camera_matrix": camera.camera_matrix,
                "baseline_m": camera.baseline_m,
            },
            "triangulation_settings": {
                "algorithm": triangulation.algorithm,
                "apply_depth_filter": triangulation.apply_depth_filter,
                "optimization_method": triangulation.optimization_method,
                "ftol": triangulation.ftol,
                "xtol": triangulation.xtol,
                "max_nfev": triangulation.max_nfev,
                "condition_threshold": triangulation.condition_threshold,
            },
            "correspondence_settings": {
                "detector": correspondence.detector,
                "max_features": correspondence.max_features,
                "ratio_test": correspondence.ratio_test,
                "cross_check": correspondence.cross_check,
            },
        }

        # Current configuration
        self.config = copy.deepcopy(self.default_config)

        # Configuration file path
        self.config_file = Path(config_file)

        # Load configuration from file if it exists
        self.load_config()

    @handle_errors(action=ErrorAction.RETURN_FALSE,
                   message="Error loading configuration: {error}",
                   exception_types=(OSError, ValueError))
    def load_config(self):
        """
        Load configuration from the configuration file.
        Sections are merged key by key so that missing keys keep their defaults.
        If the file doesn't exist or is invalid, the default configuration is kept.

        Returns:
            bool: True if a file was loaded
        """
        if not self.config_file.exists():
            return False

        with open(self.config_file, "r") as f:
            loaded_config = json.load(f)

        for section, values in loaded_config.items():
            if isinstance(values, dict) and isinstance(self.config.get(section), dict):
                self.config[section].update(values)
            else:
                self.config[section] = values

        logger.info(f"Configuration loaded from {self.config_file}")
        return True

    @handle_errors(action=ErrorAction.RETURN_FALSE,
                   message="Error saving configuration: {error}",
                   exception_types=(OSError, TypeError))
    def save_config(self):
        """
        Save the current configuration to the configuration file.

        Returns:
            bool: True if the file was written
        """
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self.config, f, indent=4)

        logger.info(f"Configuration saved to {self.config_file}")
        return True

    def get(self, key, default=None):
        """
        Get a configuration value.

        Args:
            key (str): Configuration key
            default: Default value if the key doesn't exist

        Returns:
            Configuration value
        """
        return self.config.get(key, default)

    def set(self, key, value):
        """
        Set a configuration value.

        Args:
            key (str): Configuration key
            value: Configuration value
        """
        self.config[key] = value

    def get_value(self, section, key, default=None):
        """
        Get a specific value from a configuration section.

        Args:
            section (str): Section name
            key (str): Key within the section
            default: Default value if the key or section doesn't exist

        Returns:
            Configuration value or default
        """
        section_data = self.config.get(section, {})
        return section_data.get(key, default)

    def get_camera_settings(self):
        """
        Get the camera settings.

        Returns:
            dict: Camera settings (camera_matrix, baseline_m)
        """
        return self.get("camera_settings", self.default_config["camera_settings"]).copy()

    def set_camera_settings(self, camera_settings):
        """
        Update the camera settings.

        Args:
            camera_settings (dict): Camera settings; numpy arrays are stored as lists
        """
        settings = dict(camera_settings)
        if isinstance(settings.get("camera_matrix"), np.ndarray):
            settings["camera_matrix"] = settings["camera_matrix"].tolist()

        current_settings = self.get_camera_settings()
        current_settings.update(settings)
        self.set("camera_settings", current_settings)

    def get_camera_matrix(self):
        """
        Get the intrinsic matrix.

        Returns:
            np.ndarray: 3x3 float64 camera matrix
        """
        return np.array(self.get_camera_settings()["camera_matrix"], dtype=np.float64)

    def get_baseline(self):
        """
        Get the stereo baseline in meters.
        """
        return float(self.get_camera_settings()["baseline_m"])

    def get_triangulation_settings(self):
        """
        Get the triangulation settings.

        Returns:
            dict: Triangulation settings
        """
        return self.get("triangulation_settings", self.default_config["triangulation_settings"]).copy()

    def set_triangulation_settings(self, triangulation_settings):
        """
        Update the triangulation settings.

        Args:
            triangulation_settings (dict): Triangulation settings
        """
        current_settings = self.get_triangulation_settings()
        current_settings.update(triangulation_settings)
        self.set("triangulation_settings", current_settings)

    def get_correspondence_settings(self):
        """
        Get the feature detection and matching settings.

        Returns:
            dict: Correspondence settings
        """
        return self.get("correspondence_settings", self.default_config["correspondence_settings"]).copy()

    def set_correspondence_settings(self, correspondence_settings):
        """
        Update the feature detection and matching settings.

        Args:
            correspondence_settings (dict): Correspondence settings
        """
        current_settings = self.get_correspondence_settings()
        current_settings.update(correspondence_settings)
        self.set("correspondence_settings", current_settings)
