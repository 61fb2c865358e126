"""
Utility functions and helper classes.
"""

from .logger import Logger, LogLevel, logger, set_log_level, get_logger
from .error_handler import (
    ErrorHandler, ToolValidator, ErrorContext, ErrorType, ErrorSeverity,
    LanDiscoveryError, NetworkDetectionError, ToolMissingError,
    ConfigurationError, ValidationError
)
from . import network_utils

__all__ = [
    'Logger',
    'LogLevel',
    'logger',
    'set_log_level',
    'get_logger',
    'ErrorHandler',
    'ToolValidator',
    'ErrorContext',
    'ErrorType',
    'ErrorSeverity',
    'LanDiscoveryError',
    'NetworkDetectionError',
    'ToolMissingError',
    'ConfigurationError',
    'ValidationError',
    'network_utils'
]
