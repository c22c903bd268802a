"""
Logging infrastructure for Twig.

Provides structured logging with:
- Component-specific loggers (objects, refs, staging, worktree, merge)
- Optional rotating log files kept inside the repository directory
- A dedicated merge log for conflict auditing
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger

COMPONENTS = ("system", "objects", "refs", "staging", "worktree", "merge")


class TwigLogger:
    """
    Logger for Twig with component-specific sinks.

    Features:
    - Structured logging with bound context
    - Console output on stderr
    - Log rotation and retention for file sinks
    """

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        rotation: str = "10 MB",
        retention: str = "1 month",
        level: str = "WARNING",
        format_string: Optional[str] = None,
        enable_file_logging: bool = False,
        enable_console_logging: bool = True,
    ):
        """
        Initialize the Twig logger.

        Args:
            log_dir: Directory for log files
            rotation: When to rotate log files
            retention: How long to keep old logs
            level: Default log level
            format_string: Custom format string
            enable_file_logging: Whether to log to files
            enable_console_logging: Whether to log to console
        """
        self.log_dir = log_dir or Path("logs")
        self.rotation = rotation
        self.retention = retention
        self.level = level

        self.format_string = format_string or (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )

        # Remove default handler
        logger.remove()
        logger.configure(extra={"component": "system"})

        if enable_console_logging:
            logger.add(
                sys.stderr,
                format=self.format_string,
                level=level,
                colorize=True,
            )

        if enable_file_logging:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self._add_file_handlers()

        self.logger = logger.bind(component="system")

    def _add_file_handlers(self) -> None:
        """Add file handlers for the main, merge and error logs."""

        logger.add(
            self.log_dir / "twig.log",
            format=self.format_string,
            level=self.level,
            rotation=self.rotation,
            retention=self.retention,
        )

        # Merge decisions are always kept at DEBUG for auditing conflicts
        logger.add(
            self.log_dir / "merge.log",
            format=self.format_string,
            level="DEBUG",
            rotation=self.rotation,
            retention=self.retention,
            filter=lambda record: record["extra"].get("component") == "merge",
        )

        logger.add(
            self.log_dir / "errors.log",
            format=self.format_string,
            level="ERROR",
            rotation=self.rotation,
            retention=self.retention,
        )

    def get_logger(self, component: str) -> Any:
        """
        Get a logger bound to a specific component.

        Args:
            component: Component name (e.g., "objects", "merge")

        Returns:
            Logger instance bound to the component
        """
        return logger.bind(component=component)


def get_twig_logger(component: str = "system") -> Any:
    """
    Get a component-specific logger.

    Args:
        component: Component name

    Returns:
        Logger instance

    Example:
        >>> log = get_twig_logger("refs")
        >>> log.info("Branch created", branch="feature")
    """
    return logger.bind(component=component)


def log_repository_operation(logger_instance: Any, operation: str, **kwargs: Any) -> None:
    """
    Log a repository operation with structured data.

    Args:
        logger_instance: Logger to use
        operation: Operation name (e.g., "commit", "merge_error")
        **kwargs: Additional context
    """
    logger_instance.debug(
        f"Repository operation: {operation}",
        operation=operation,
        timestamp=datetime.now(timezone.utc).isoformat(),
        **kwargs,
    )


# Global logger instance
_twig_logger: Optional[TwigLogger] = None


def initialize_logging(
    log_dir: Optional[Path] = None, level: str = "WARNING", **kwargs: Any
) -> TwigLogger:
    """
    Initialize the Twig logging system.

    This should be called once at application startup.

    Args:
        log_dir: Directory for log files
        level: Default log level
        **kwargs: Additional configuration for TwigLogger

    Returns:
        Configured TwigLogger instance
    """
    global _twig_logger
    _twig_logger = TwigLogger(log_dir=log_dir, level=level, **kwargs)
    return _twig_logger


def get_logger_instance() -> Optional[TwigLogger]:
    """Get the global logger instance."""
    return _twig_logger
