# =============================================================================
# studio_core/state/session.py
# Wiring the data service into Streamlit sessions
# =============================================================================
"""
One UnifiedDataService and one DataVersion are cached per server
process and shared by every browser session. Local writes bump the
DataVersion from whichever thread performed them; each session keeps
the last version it has seen in its own st.session_state and compares:

    service = bind_session_invalidation()
    if has_data_changed():
        st.cache_data.clear()
    posts = service.list_posts()
"""

from __future__ import annotations
import threading
from typing import Optional

import streamlit as st

from studio_core.config import load_settings
from studio_core.logging import get_logger
from studio_core.offline import ChangeEvent, UnifiedDataService

logger = get_logger(__name__)

# Per-session: the server-wide version this session last rendered with.
DATA_VERSION_KEY = "studio_data_version"


class DataVersion:
    """Server-wide count of local data changes."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def bump(self, event: ChangeEvent) -> None:
        with self._lock:
            self._value += 1
        logger.debug(f"Data version bumped by write to {event.key}")


@st.cache_resource
def get_data_service() -> UnifiedDataService:
    """
    Get the data service shared by every session of this server.

    Built once from load_settings(); restart the app to pick up new
    credentials.
    """
    service = UnifiedDataService.from_settings(load_settings())
    logger.info(f"Data service ready. Remote configured: {service.is_remote_configured}")
    return service


@st.cache_resource
def get_data_version() -> DataVersion:
    """Get the change counter shared by every session of this server."""
    return DataVersion()


def bind_session_invalidation(
    service: Optional[UnifiedDataService] = None,
    version: Optional[DataVersion] = None,
) -> UnifiedDataService:
    """
    Make local writes from any session visible to the current one.

    Call once near the top of each page. Binding again is harmless.
    """
    service = service or get_data_service()
    version = version or get_data_version()
    service.subscribe(version.bump)
    if DATA_VERSION_KEY not in st.session_state:
        st.session_state[DATA_VERSION_KEY] = version.value
    return service


def data_version(version: Optional[DataVersion] = None) -> int:
    """Current server-wide change counter."""
    return (version or get_data_version()).value


def has_data_changed(version: Optional[DataVersion] = None) -> bool:
    """
    True if local data changed since this session last asked.

    Records the current version as seen, so the next call returns False
    until another write happens.
    """
    current = data_version(version)
    seen = st.session_state.get(DATA_VERSION_KEY, current)
    st.session_state[DATA_VERSION_KEY] = current
    return seen != current
