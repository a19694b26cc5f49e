# =============================================================================
# studio_core/state/__init__.py
# Streamlit session integration
# =============================================================================

from .session import (
    DATA_VERSION_KEY,
    DataVersion,
    get_data_service,
    get_data_version,
    bind_session_invalidation,
    data_version,
    has_data_changed,
)

__all__ = [
    "DATA_VERSION_KEY",
    "DataVersion",
    "get_data_service",
    "get_data_version",
    "bind_session_invalidation",
    "data_version",
    "has_data_changed",
]
