# =============================================================================
# studio_core/errors/exceptions.py
# Custom Exception Hierarchy for the Studio data layer
# =============================================================================

from typing import Optional, Dict, Any


class StudioError(Exception):
    """
    Base exception for all Studio data layer errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "SYNC_001")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "STUDIO_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# SYNC LAYER EXCEPTIONS
# =============================================================================

class RemoteSyncError(StudioError):
    """Raised when the remote data endpoint cannot serve a request"""

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        method: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if method:
            details["method"] = method
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(
            message=message,
            code="SYNC_001",
            details=details,
            **kwargs,
        )


class LocalStoreError(StudioError):
    """Raised when the local key/value store cannot be read or written"""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if key:
            details["key"] = key

        super().__init__(
            message=message,
            code="STORE_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# DATA LAYER EXCEPTIONS
# =============================================================================

class RecordValidationError(StudioError):
    """Raised when a stored or remote payload does not match a record shape"""

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        field: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if record_type:
            details["record_type"] = record_type
        if field:
            details["field"] = field

        super().__init__(
            message=message,
            code="DATA_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(StudioError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
