# =============================================================================
# studio_core/errors/handlers.py
# Error Handling Utilities for the Studio data layer
# =============================================================================

from __future__ import annotations
import functools
import traceback
from typing import Optional, Callable, TypeVar, Any

from studio_core.logging import get_logger
from .exceptions import StudioError

logger = get_logger(__name__)

T = TypeVar("T")


def handle_error(
    error: Exception,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> dict:
    """
    Centralized error handling function.

    Args:
        error: The exception to handle
        log_error: Whether to log the error
        user_message: Custom message (uses error message if None)

    Returns:
        Dictionary describing the error, suitable for status displays
    """
    if isinstance(error, StudioError):
        message = user_message or error.message
        code = error.code
        details = error.details
        recoverable = error.recoverable
    else:
        message = user_message or str(error)
        code = "UNKNOWN"
        details = {"traceback": traceback.format_exc()}
        recoverable = True

    if log_error:
        logger.error(
            f"[{code}] {message}",
            extra={"details": details},
            exc_info=error,
        )

    return {
        "code": code,
        "message": message,
        "details": details,
        "recoverable": recoverable,
    }


class ErrorContext:
    """
    Context manager for error handling with automatic logging.

    Usage:
        with ErrorContext("Seeding local categories", recoverable=True):
            store.set("categories", defaults)

        # On error, logs "Error during: Seeding local categories"
    """

    def __init__(self, operation: str, recoverable: bool = True):
        self.operation = operation
        self.recoverable = recoverable

    def __enter__(self) -> ErrorContext:
        logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            if isinstance(exc_val, StudioError):
                handle_error(exc_val)
            else:
                handle_error(exc_val, user_message=f"Error during: {self.operation}")

            # Suppress exception if recoverable
            return self.recoverable

        logger.debug(f"Completed: {self.operation}")
        return False


def error_boundary(
    default_return: Any = None,
    log: bool = True,
):
    """
    Decorator to wrap functions with error handling.

    A callable default_return is invoked on each failure so mutable
    sentinels are never shared between callers.

    Usage:
        @error_boundary(default_return=list)
        def generate_ideas(niche: str) -> List[dict]:
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Optional[T]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Optional[T]:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if log:
                    logger.error(
                        f"Error in {func.__name__}: {e}",
                        exc_info=True,
                    )
                return default_return() if callable(default_return) else default_return

        return wrapper

    return decorator
