# =============================================================================
# studio_core/ai/__init__.py
# Generative-content collaborator boundary
# =============================================================================

from .content_engine import (
    ContentEngine,
    GuardedContentEngine,
    SEOOutput,
    ViralIdea,
    TrendTopic,
    TrendFeed,
    NewsReport,
    SearchResource,
    SearchResult,
    SEO_FALLBACK,
    SCRIPT_FALLBACK,
    trends_fallback,
    search_fallback,
)

__all__ = [
    "ContentEngine",
    "GuardedContentEngine",
    "SEOOutput",
    "ViralIdea",
    "TrendTopic",
    "TrendFeed",
    "NewsReport",
    "SearchResource",
    "SearchResult",
    "SEO_FALLBACK",
    "SCRIPT_FALLBACK",
    "trends_fallback",
    "search_fallback",
]
