# =============================================================================
# studio_core/models/entities.py
# Plain records persisted by the data layer
# =============================================================================
"""
Entity records.

Every record serializes to the local (camelCase) shape with to_dict()
and is rebuilt with from_dict(). from_dict() ignores keys it does not
know, so rows carrying extra server-side columns still load, and raises
RecordValidationError when a required field is missing or mistyped.
"""

from __future__ import annotations
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from studio_core.errors import RecordValidationError


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def slugify(name: str) -> str:
    """Lower-case a name and turn whitespace runs into single hyphens."""
    return re.sub(r"\s+", "-", name.lower())


def _require(data: Mapping[str, Any], key: str, record_type: str, kind: type = str) -> Any:
    if not isinstance(data, Mapping):
        raise RecordValidationError(
            f"{record_type} payload must be an object",
            record_type=record_type,
        )
    value = data.get(key)
    if not isinstance(value, kind) or isinstance(value, bool):
        raise RecordValidationError(
            f"{record_type}.{key} is missing or not a {kind.__name__}",
            record_type=record_type,
            field=key,
        )
    return value


def _require_id(data: Mapping[str, Any], record_type: str) -> str:
    """Record id as a string; bigint ids from the server are accepted."""
    if isinstance(data, Mapping):
        value = data.get("id")
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
    return _require(data, "id", record_type)


def _optional(data: Mapping[str, Any], key: str, record_type: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise RecordValidationError(
            f"{record_type}.{key} must be a string",
            record_type=record_type,
            field=key,
        )
    return value


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop optional keys that are unset."""
    return {k: v for k, v in data.items() if v is not None}


class MessageType(Enum):
    """Kinds of community message."""
    ERROR = "ERROR"
    COLAB = "COLAB"
    REQUEST = "REQUEST"


class AdNetwork(Enum):
    """Ad network selector for the monetization settings."""
    NONE = "NONE"
    MONEYTIZER = "MONEYTIZER"
    ADSTERRA = "ADSTERRA"
    EZOIC = "EZOIC"
    MIXED = "MIXED"


@dataclass
class Post:
    """A published content post."""
    id: str
    title: str
    description: str
    category: str
    date: str
    video_url: Optional[str] = None
    download_url: Optional[str] = None
    main_image: Optional[str] = None
    mini_image: Optional[str] = None
    created_at: Optional[int] = None  # epoch ms, stamped on first local save

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "id": self.id,
            "title": self.title,
            "videoUrl": self.video_url,
            "description": self.description,
            "downloadUrl": self.download_url,
            "category": self.category,
            "mainImage": self.main_image,
            "miniImage": self.mini_image,
            "date": self.date,
            "createdAt": self.created_at,
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Post:
        created_at = data.get("createdAt") if isinstance(data, Mapping) else None
        if created_at is not None:
            created_at = _require(data, "createdAt", "Post", int)
        return cls(
            id=_require_id(data, "Post"),
            title=_require(data, "title", "Post"),
            description=_require(data, "description", "Post"),
            category=_require(data, "category", "Post"),
            date=_require(data, "date", "Post"),
            video_url=_optional(data, "videoUrl", "Post"),
            download_url=_optional(data, "downloadUrl", "Post"),
            main_image=_optional(data, "mainImage", "Post"),
            mini_image=_optional(data, "miniImage", "Post"),
            created_at=created_at,
        )


@dataclass
class Category:
    """A post category; slug is derived from the name."""
    id: str
    name: str
    slug: str

    @classmethod
    def create(cls, name: str, id: Optional[str] = None) -> Category:
        """Build a category with a clock-derived id and a derived slug."""
        return cls(id=id or str(now_ms()), name=name, slug=slugify(name))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "slug": self.slug}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Category:
        return cls(
            id=_require_id(data, "Category"),
            name=_require(data, "name", "Category"),
            slug=_require(data, "slug", "Category"),
        )


@dataclass
class CommunityMessage:
    """A message posted by a community member."""
    id: str
    user: str
    type: MessageType
    message: str
    date: str
    timestamp: int = 0  # epoch ms, used for ordering
    audio_url: Optional[str] = None
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "id": self.id,
            "user": self.user,
            "type": self.type.value,
            "message": self.message,
            "audioUrl": self.audio_url,
            "imageUrl": self.image_url,
            "date": self.date,
            "timestamp": self.timestamp,
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CommunityMessage:
        raw_type = _require(data, "type", "CommunityMessage")
        try:
            message_type = MessageType(raw_type)
        except ValueError as e:
            raise RecordValidationError(
                f"Unknown message type: {raw_type!r}",
                record_type="CommunityMessage",
                field="type",
            ) from e

        return cls(
            id=_require_id(data, "CommunityMessage"),
            user=_require(data, "user", "CommunityMessage"),
            type=message_type,
            message=_require(data, "message", "CommunityMessage"),
            date=_require(data, "date", "CommunityMessage"),
            timestamp=_require(data, "timestamp", "CommunityMessage", int),
            audio_url=_optional(data, "audioUrl", "CommunityMessage"),
            image_url=_optional(data, "imageUrl", "CommunityMessage"),
        )


@dataclass
class MonetizationConfig:
    """Singleton ad-network settings."""
    moneytizer_id: str = ""
    adsterra_script: str = ""
    ezoic_id: str = ""
    active_network: AdNetwork = AdNetwork.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "moneytizerId": self.moneytizer_id,
            "adsterraScript": self.adsterra_script,
            "ezoicId": self.ezoic_id,
            "activeNetwork": self.active_network.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MonetizationConfig:
        if not isinstance(data, Mapping):
            raise RecordValidationError(
                "MonetizationConfig payload must be an object",
                record_type="MonetizationConfig",
            )
        raw_network = data.get("activeNetwork", AdNetwork.NONE.value)
        try:
            network = AdNetwork(raw_network)
        except ValueError as e:
            raise RecordValidationError(
                f"Unknown ad network: {raw_network!r}",
                record_type="MonetizationConfig",
                field="activeNetwork",
            ) from e

        return cls(
            moneytizer_id=_optional(data, "moneytizerId", "MonetizationConfig") or "",
            adsterra_script=_optional(data, "adsterraScript", "MonetizationConfig") or "",
            ezoic_id=_optional(data, "ezoicId", "MonetizationConfig") or "",
            active_network=network,
        )


@dataclass
class StudioConfig:
    """The two singleton settings, read and written together."""
    subs: int
    monetization: MonetizationConfig = field(default_factory=MonetizationConfig)
