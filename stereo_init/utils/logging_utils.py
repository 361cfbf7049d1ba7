#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Logging Utilities Module
This module contains common logging utility functions: standardized service
initialization messages, root logger setup and stage timing.
"""

import logging
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, Callable, Union

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Signature of the optional observability hook: (stage_name, elapsed_seconds)
StageCallback = Callable[[str, float], None]


class LevelFilter(logging.Filter):
    """Only pass records of exactly one level."""

    def __init__(self, level):
        super().__init__()
        self.level = level

    def filter(self, record):
        return record.levelno == self.level


def setup_logging(level: int = logging.INFO,
                  log_dir: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configure the root logger with a console handler and, optionally,
    one file per log level under ``log_dir/<level>/``.

    Args:
        level: Console logging level
        log_dir: Directory for per-level log files (None disables file logging)

    Returns:
        The configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        level_configs = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
            "critical": logging.CRITICAL,
        }
        for level_name, level_value in level_configs.items():
            level_path = Path(log_dir) / level_name
            level_path.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(level_path / f"{level_name}_{timestamp}.log")
            file_handler.setLevel(level_value)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            file_handler.addFilter(LevelFilter(level_value))
            root_logger.addHandler(file_handler)

    logger.info(f"Logging configured (console level: {logging.getLevelName(level)})")
    return root_logger


def log_service_init(service_name: str, settings: Dict[str, Any], log_level: int = logging.INFO) -> None:
    """
    Log service initialization with standardized format.

    Args:
        service_name: Name of the service being initialized
        settings: Dictionary containing service settings
        log_level: Logging level (default: logging.INFO)
    """
    logger.log(log_level, f"{service_name} initialized with settings: {settings}")


@contextmanager
def timed_stage(stage: str,
                on_stage: Optional[StageCallback] = None,
                timings: Optional[Dict[str, float]] = None,
                log_level: int = logging.INFO):
    """
    Measure the wall time of a processing stage.

    The elapsed time is logged, stored in ``timings`` under ``stage`` and
    passed to ``on_stage`` when given. Nothing is recorded if the block raises.

    Example:
        >>> with timed_stage("triangulation", on_stage=print):
        ...     run()
    """
    start = time.perf_counter()
    yield
    elapsed = time.perf_counter() - start

    logger.log(log_level, f"It took {elapsed:.3f}s to compute {stage}")
    if timings is not None:
        timings[stage] = elapsed
    if on_stage is not None:
        on_stage(stage, elapsed)
