# =============================================================================
# studio_core/config/__init__.py
# Store configuration
# =============================================================================

from .settings import (
    StoreSettings,
    load_settings,
    DEFAULT_SECRETS_PATH,
)

__all__ = [
    "StoreSettings",
    "load_settings",
    "DEFAULT_SECRETS_PATH",
]
