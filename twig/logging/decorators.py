"""
Decorators for automatic logging of repository operations.

These decorators enable traceability without cluttering business logic.
"""

import functools
import inspect
import time
import uuid
from typing import Any, Callable

from .logger import get_twig_logger, log_repository_operation


def track_operation(operation_type: str, component: str = "system") -> Callable:
    """
    Decorator to track a user-facing repository operation.

    Logs the start, completion and failure of the call with its arguments.

    Args:
        operation_type: Operation name (e.g., "commit", "merge")
        component: Component whose logger receives the records

    Example:
        >>> @track_operation("branch", component="refs")
        ... def branch(self, name: str) -> None:
        ...     ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = get_twig_logger(component)

            sig = inspect.signature(func)
            bound_args = sig.bind(*args, **kwargs)
            bound_args.apply_defaults()

            operation_id = uuid.uuid4().hex[:8]
            log_repository_operation(
                log,
                operation=operation_type,
                operation_id=operation_id,
                function=func.__name__,
                arguments={
                    k: str(v)[:100] for k, v in bound_args.arguments.items() if k != "self"
                },
            )

            try:
                result = func(*args, **kwargs)

                log_repository_operation(
                    log,
                    operation=f"{operation_type}_complete",
                    operation_id=operation_id,
                    function=func.__name__,
                    success=True,
                )

                return result

            except Exception as e:
                log_repository_operation(
                    log,
                    operation=f"{operation_type}_error",
                    operation_id=operation_id,
                    function=func.__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                    success=False,
                )
                raise

        return wrapper

    return decorator


def performance_monitor(threshold_ms: float = 1000.0) -> Callable:
    """
    Decorator to monitor function performance.

    Logs warning if execution exceeds threshold.

    Args:
        threshold_ms: Warning threshold in milliseconds

    Example:
        >>> @performance_monitor(threshold_ms=500)
        ... def walk_history():
        ...     ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = get_twig_logger("system")

            start_time = time.perf_counter()

            try:
                result = func(*args, **kwargs)
                elapsed_ms = (time.perf_counter() - start_time) * 1000

                if elapsed_ms > threshold_ms:
                    log.warning(
                        f"Performance threshold exceeded: {func.__name__}",
                        function=func.__name__,
                        elapsed_ms=elapsed_ms,
                        threshold_ms=threshold_ms,
                    )
                else:
                    log.debug(
                        f"Function executed: {func.__name__}",
                        function=func.__name__,
                        elapsed_ms=elapsed_ms,
                    )

                return result

            except Exception:
                elapsed_ms = (time.perf_counter() - start_time) * 1000
                log.debug(
                    f"Function failed: {func.__name__}",
                    function=func.__name__,
                    elapsed_ms=elapsed_ms,
                )
                raise

        return wrapper

    return decorator
