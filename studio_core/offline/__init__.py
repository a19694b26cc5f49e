# =============================================================================
# studio_core/offline/__init__.py
# Local-First Data Access Layer
# =============================================================================
"""
Local-First Data Access Module

The dashboard keeps working whether or not the remote store is
reachable or even configured.

Architecture:
------------
    ┌──────────────────────────────────────────────┐
    │              UnifiedDataService              │
    │      (Single API - the dashboard uses this)  │
    └──────────────────────────────────────────────┘
                 │                       │
                 ▼                       ▼
       ┌──────────────────┐    ┌──────────────────┐
       │  RemoteGateway   │    │    LocalStore    │
       │ (Supabase REST)  │    │ (SQLite k/v)     │
       └──────────────────┘    └──────────────────┘
                                         │
                                         ▼
                               ┌──────────────────┐
                               │  ChangeNotifier  │
                               │ (invalidations)  │
                               └──────────────────┘

Usage:
------
from studio_core.config import load_settings
from studio_core.offline import UnifiedDataService

service = UnifiedDataService.from_settings(load_settings())
posts = service.list_posts()
"""

from studio_core.offline.change_notifier import (
    ChangeEvent,
    ChangeNotifier,
)

from studio_core.offline.local_store import LocalStore

from studio_core.offline.remote_gateway import (
    FailureKind,
    RemoteGateway,
    RemoteResult,
)

from studio_core.offline.keyed_lock import KeyedLock

from studio_core.offline.unified_data_service import UnifiedDataService

__all__ = [
    # Change notification
    "ChangeEvent",
    "ChangeNotifier",
    # Local store
    "LocalStore",
    # Remote gateway
    "FailureKind",
    "RemoteGateway",
    "RemoteResult",
    # Write serialization
    "KeyedLock",
    # Unified Service (Main API)
    "UnifiedDataService",
]
