# =============================================================================
# studio_core/ai/content_engine.py
# Request/response contract for the generative-content client
# =============================================================================
"""
The generative client (SEO packs, scripts, thumbnails, idea lists,
trend feeds, news reports, resource search) is an external
collaborator. This module fixes only its boundary:

- ContentEngine: the calls a concrete client must answer
- GuardedContentEngine: wraps any client so that every failure turns
  into a fixed fallback value instead of an exception

Callers never need per-call error handling:

    engine = GuardedContentEngine(MyGeminiClient(api_key))
    seo = engine.optimize_seo("budget gaming PC")
    if seo is SEO_FALLBACK:
        ...
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Protocol, Tuple

from studio_core.errors import error_boundary


@dataclass(frozen=True)
class SEOOutput:
    """Titles in ranked order, an unordered tag set and a description."""
    titles: Tuple[str, ...]
    tags: FrozenSet[str]
    description: str


@dataclass(frozen=True)
class ViralIdea:
    title: str
    concept: str
    potential: str
    difficulty: str


@dataclass(frozen=True)
class TrendTopic:
    title: str
    source: str
    image_url: str
    hot_score: int


@dataclass(frozen=True)
class TrendFeed:
    trends: List[TrendTopic] = field(default_factory=list)
    error: Optional[str] = None


@dataclass(frozen=True)
class NewsReport:
    title: str
    full_content: str
    video_ideas: List[str] = field(default_factory=list)
    hooks: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SearchResource:
    title: str
    description: str
    url: str
    file_types: List[str] = field(default_factory=list)
    is_direct: bool = False
    category: str = "TOOLS"  # CREATOR | NORMAL | TOOLS


@dataclass(frozen=True)
class SearchResult:
    analysis: str
    resources: List[SearchResource] = field(default_factory=list)
    error: Optional[str] = None


# Fallback values returned when the client fails
SEO_FALLBACK = SEOOutput(
    titles=("Generation error",),
    tags=frozenset({"ai", "error"}),
    description="Could not reach the SEO engine.",
)
SCRIPT_FALLBACK = "Technical error while generating the script."


def trends_fallback() -> TrendFeed:
    """Fresh trend feed returned when the client fails."""
    return TrendFeed(trends=[], error="ERROR_TRENDS")


def search_fallback() -> SearchResult:
    """Fresh search result returned when the client fails."""
    return SearchResult(
        analysis="Connection error with the search network.",
        resources=[],
        error="ERROR_AI",
    )


class ContentEngine(Protocol):
    """Calls a concrete generative client must provide."""

    def optimize_seo(self, topic: str) -> SEOOutput: ...

    def generate_script(self, topic: str) -> str: ...

    def generate_thumbnail(self, prompt: str, base_image: Optional[str] = None) -> Optional[str]: ...

    def generate_viral_ideas(self, niche: str) -> List[ViralIdea]: ...

    def fetch_trends(self) -> TrendFeed: ...

    def get_news_detail(self, title: str, source: str) -> Optional[NewsReport]: ...

    def find_resources(self, query: str) -> SearchResult: ...


class GuardedContentEngine:
    """ContentEngine wrapper that never raises past its own boundary."""

    def __init__(self, engine: ContentEngine):
        self._engine = engine

    @error_boundary(default_return=SEO_FALLBACK)
    def optimize_seo(self, topic: str) -> SEOOutput:
        return self._engine.optimize_seo(topic)

    @error_boundary(default_return=SCRIPT_FALLBACK)
    def generate_script(self, topic: str) -> str:
        return self._engine.generate_script(topic)

    @error_boundary(default_return=None)
    def generate_thumbnail(self, prompt: str, base_image: Optional[str] = None) -> Optional[str]:
        return self._engine.generate_thumbnail(prompt, base_image)

    @error_boundary(default_return=list)
    def generate_viral_ideas(self, niche: str) -> List[ViralIdea]:
        return list(self._engine.generate_viral_ideas(niche))

    @error_boundary(default_return=trends_fallback)
    def fetch_trends(self) -> TrendFeed:
        return self._engine.fetch_trends()

    @error_boundary(default_return=None)
    def get_news_detail(self, title: str, source: str) -> Optional[NewsReport]:
        return self._engine.get_news_detail(title, source)

    @error_boundary(default_return=search_fallback)
    def find_resources(self, query: str) -> SearchResult:
        return self._engine.find_resources(query)
