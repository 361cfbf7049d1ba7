#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Error handling utilities.
This module defines the stereo initialisation error taxonomy and provides
decorators for consistent error handling across the I/O helpers.
"""

import functools
import logging
import enum
import traceback
from typing import Any, Callable, TypeVar, Union

logger = logging.getLogger(__name__)

# Type variable for function return type
T = TypeVar('T')


class StereoInitError(Exception):
    """Base class for all stereo initialisation errors."""


class ConfigurationError(StereoInitError, ValueError):
    """
    Raised for caller misconfiguration: unknown triangulation algorithm,
    mismatched correspondence lengths or malformed camera parameters.
    """


class DegenerateGeometryWarning(RuntimeWarning):
    """
    Non-fatal warning for near-singular per-point solves (near-parallel rays
    or a baseline that is negligible relative to scene depth).
    """


class ErrorAction(enum.Enum):
    """Enum defining actions to take when an error occurs."""
    RETURN_DEFAULT = 'return_default'
    RETURN_FALSE = 'return_false'  # Specifically for returning False
    RAISE = 'raise'


def handle_errors(action: ErrorAction = ErrorAction.RETURN_DEFAULT,
                  default_return: Any = None,
                  message: str = "An error occurred: {error}",
                  log_level: int = logging.ERROR,
                  log_traceback: bool = False,
                  exception_types: tuple = (Exception,)) -> Callable:
    """
    Decorator that provides consistent error handling.

    Args:
        action: Action to take when an exception occurs
        default_return: Value to return if action is RETURN_DEFAULT
        message: Message template for the error log (can use {error} placeholder)
        log_level: Logging level to use
        log_traceback: Whether to log the full traceback
        exception_types: Tuple of exception types to catch; anything else propagates

    Returns:
        Decorated function with error handling
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Union[T, Any]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Union[T, Any]:
            try:
                return func(*args, **kwargs)
            except exception_types as error:
                # Format error message
                error_message = message.format(error=str(error))

                # Log the error
                if log_traceback:
                    logger.log(log_level, f"{error_message}\n{traceback.format_exc()}")
                else:
                    logger.log(log_level, error_message)

                # Handle error according to action
                if action == ErrorAction.RAISE:
                    raise
                elif action == ErrorAction.RETURN_FALSE:
                    return False
                return default_return

        return wrapper
    return decorator
