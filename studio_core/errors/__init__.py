# =============================================================================
# studio_core/errors/__init__.py
# Centralized Error Handling for the Studio data layer
# =============================================================================

from .exceptions import (
    StudioError,
    RemoteSyncError,
    LocalStoreError,
    RecordValidationError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    error_boundary,
    ErrorContext,
)

__all__ = [
    # Exceptions
    "StudioError",
    "RemoteSyncError",
    "LocalStoreError",
    "RecordValidationError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "error_boundary",
    "ErrorContext",
]
