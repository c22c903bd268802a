"""
Logging infrastructure for Twig.

Provides structured, component-bound logging and tracking decorators.
"""

from .logger import (
    COMPONENTS,
    TwigLogger,
    get_twig_logger,
    initialize_logging,
    get_logger_instance,
    log_repository_operation,
)

from .decorators import (
    track_operation,
    performance_monitor,
)

__all__ = [
    # Logger
    "COMPONENTS",
    "TwigLogger",
    "get_twig_logger",
    "initialize_logging",
    "get_logger_instance",
    "log_repository_operation",
    # Decorators
    "track_operation",
    "performance_monitor",
]
