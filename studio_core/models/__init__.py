# =============================================================================
# studio_core/models/__init__.py
# Record types managed by the data layer
# =============================================================================

from .entities import (
    Post,
    Category,
    CommunityMessage,
    MessageType,
    AdNetwork,
    MonetizationConfig,
    StudioConfig,
    slugify,
    now_ms,
)

__all__ = [
    "Post",
    "Category",
    "CommunityMessage",
    "MessageType",
    "AdNetwork",
    "MonetizationConfig",
    "StudioConfig",
    "slugify",
    "now_ms",
]
