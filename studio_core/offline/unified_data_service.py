# =============================================================================
# studio_core/offline/unified_data_service.py
# Unified Data Service - Single API for Online/Offline Operations
# =============================================================================
"""
UnifiedDataService - the only data API the dashboard talks to.

Each call decides on its own whether to trust the remote store or the
local one:

- Reads ask the remote first. A successful remote read is returned as
  is and is never copied into the local store. Any remote failure falls
  back to the local copy, then to a built-in default.
- Writes go to the remote first. Only when the remote write fails is
  the local collection updated, so a record written during an outage
  lives in the local store only.
- Deletes always hit both tiers; deleting an unknown id is a no-op.
- The monetization settings and the subscriber count live locally only.

None of these operations raise for a missing credential, an
unreachable or failing endpoint, malformed JSON, or a corrupt local
payload.

Usage:
------
from studio_core.config import load_settings
from studio_core.offline import UnifiedDataService

service = UnifiedDataService.from_settings(load_settings())
service.subscribe(lambda event: print("changed:", event.key))

service.add_category("Xbox Series X")
posts = service.list_posts()
"""

from __future__ import annotations
import dataclasses
from typing import Any, Callable, Dict, List, Optional, TypeVar

from studio_core.config import StoreSettings
from studio_core.errors import ErrorContext, LocalStoreError, RecordValidationError
from studio_core.logging import LogContext, get_logger
from studio_core.models import (
    Category,
    CommunityMessage,
    MonetizationConfig,
    Post,
    StudioConfig,
    now_ms,
)
from studio_core.offline.change_notifier import ChangeListener, ChangeNotifier
from studio_core.offline.keyed_lock import KeyedLock
from studio_core.offline.local_store import LocalStore
from studio_core.offline.remote_gateway import (
    FailureKind,
    RemoteGateway,
    RemoteResult,
    rows_or_none,
)
from studio_core.offline.row_mapping import message_to_row, rows_to_messages

logger = get_logger(__name__)

R = TypeVar("R")


class UnifiedDataService:
    """
    Remote-first, local-fallback CRUD for every dashboard entity.

    Build it once at startup and inject it where it is needed; the
    settings are fixed at construction.
    """

    # Local store logical names
    POSTS_KEY = "posts"
    CATEGORIES_KEY = "categories"
    MESSAGES_KEY = "messages"
    MONETIZATION_KEY = "monetization"
    SUBS_KEY = "subs"

    # Remote resources
    TABLE_MAPPING = {
        POSTS_KEY: "posts",
        CATEGORIES_KEY: "categories",
        MESSAGES_KEY: "community_messages",
    }
    NEWEST_FIRST = "created_at.desc"

    DEFAULT_CATEGORIES = (
        ("1", "PC", "pc"),
        ("2", "Android", "android"),
    )

    def __init__(
        self,
        local_store: LocalStore,
        gateway: RemoteGateway,
        locks: Optional[KeyedLock] = None,
        default_subs: int = 28,
        legacy_subs_key: str = "richacks_manual_subs",
    ):
        """
        Initialize the unified data service.

        Args:
            local_store: Durable fallback store
            gateway: Client for the remote store
            locks: Per-collection write locks (a private set if omitted)
            default_subs: Subscriber count reported before one is saved
            legacy_subs_key: Raw key mirroring the subscriber count
        """
        self.local_store = local_store
        self.gateway = gateway
        self.locks = locks or KeyedLock()
        self.default_subs = default_subs
        self.legacy_subs_key = legacy_subs_key

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> UnifiedDataService:
        """Build the service and its collaborators from StoreSettings."""
        local_store = LocalStore(
            settings.db_path,
            app_prefix=settings.app_prefix,
            schema_version=settings.schema_version,
        )
        gateway = RemoteGateway(
            settings.base_url,
            settings.api_key,
            timeout=settings.timeout,
        )
        return cls(
            local_store,
            gateway,
            default_subs=settings.default_subs,
            legacy_subs_key=settings.legacy_subs_key,
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def notifier(self) -> ChangeNotifier:
        return self.local_store.notifier

    @property
    def is_remote_configured(self) -> bool:
        return self.gateway.is_configured

    def subscribe(self, listener: ChangeListener) -> None:
        """Register a listener for local data changes."""
        self.notifier.subscribe(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        self.notifier.unsubscribe(listener)

    def get_status(self) -> Dict[str, Any]:
        """Status information for diagnostics displays."""
        return {
            "remote_configured": self.is_remote_configured,
            "remote_url": self.gateway.base_url,
            "local_db": str(self.local_store.db_path),
            "namespace": self.local_store.namespaced(""),
            "listeners": self.notifier.listener_count,
        }

    # =========================================================================
    # GENERIC OPERATIONS
    # =========================================================================

    def _log_remote_failure(self, action: str, result: RemoteResult) -> None:
        if result.failure is FailureKind.CREDENTIAL_ABSENT:
            logger.debug(f"{action}: remote not configured, using local store")
        else:
            kind = result.failure.value if result.failure else "unexpected_payload"
            logger.warning(f"{action}: remote unavailable ({kind}): {result.error}")

    def _load_local(
        self,
        key: str,
        from_dict: Callable[[Dict[str, Any]], R],
        default: Callable[[], List[R]],
    ) -> List[R]:
        """
        Local collection for key.

        Absent or non-list data yields default(); a malformed record is
        skipped while the rest of the collection is still returned.
        """
        raw = self.local_store.get(key, None)
        if raw is None:
            return default()
        if not isinstance(raw, list):
            logger.warning(f"Local {key} is not a list, using default")
            return default()

        records = []
        for item in raw:
            try:
                records.append(from_dict(item))
            except RecordValidationError as e:
                logger.warning(f"Skipping malformed local {key} record: {e}")
        return records

    def _load_local_items(self, key: str, default: Callable[[], List[Any]]) -> List[Any]:
        """
        Stored collection for key exactly as persisted, for rewriting.

        Entries are kept undecoded so that a write never drops a record
        it cannot parse.
        """
        raw = self.local_store.get(key, None)
        if isinstance(raw, list):
            return raw
        if raw is not None:
            logger.warning(f"Local {key} is not a list, rewriting from default")
        return [record.to_dict() for record in default()]

    def _store_local(self, key: str, items: List[Any]) -> bool:
        try:
            self.local_store.set(key, items)
            return True
        except LocalStoreError as e:
            logger.error(f"Could not persist {key} locally: {e}")
            return False

    def _fetch(
        self,
        key: str,
        rows_to_records: Callable[[List[Dict[str, Any]]], List[R]],
        from_dict: Callable[[Dict[str, Any]], R],
        default: Callable[[], List[R]],
        order: Optional[str] = None,
    ) -> List[R]:
        """Remote list if it succeeds, otherwise the local fallback chain."""
        result = self.gateway.list_rows(self.TABLE_MAPPING[key], order=order)
        rows = rows_or_none(result)
        if rows is not None:
            try:
                return rows_to_records(rows)
            except RecordValidationError as e:
                logger.warning(f"Remote {key} rows are malformed, using local store: {e}")
        else:
            self._log_remote_failure(f"List {key}", result)

        return self._load_local(key, from_dict, default)

    def _save(
        self,
        key: str,
        record: Any,
        row: Dict[str, Any],
        default: Callable[[], List[Any]],
        on_insert: Callable[[Any], Any],
        prepend: bool = True,
    ) -> bool:
        """
        Remote insert, or a local upsert when the remote write fails.

        Returns:
            True if the remote store accepted the record
        """
        result = self.gateway.insert_row(self.TABLE_MAPPING[key], row)
        if result:
            logger.debug(f"Saved {key} record {record.id} remotely")
            return True

        self._log_remote_failure(f"Save {key} record {record.id}", result)
        with self.locks.hold(key), LogContext(logger, f"Local upsert of {key} record {record.id}"):
            items = self._load_local_items(key, default)
            index = next(
                (i for i, item in enumerate(items) if _stored_id(item) == record.id), None
            )
            if index is not None:
                items[index] = record.to_dict()
            elif prepend:
                items.insert(0, on_insert(record).to_dict())
            else:
                items.append(on_insert(record).to_dict())
            self._store_local(key, items)
        return False

    def _delete(
        self,
        key: str,
        record_id: str,
        default: Callable[[], List[Any]],
    ) -> None:
        """Delete from both tiers; the remote outcome is only logged."""
        result = self.gateway.delete_row(self.TABLE_MAPPING[key], record_id)
        if not result:
            self._log_remote_failure(f"Delete {key} record {record_id}", result)

        with self.locks.hold(key), LogContext(logger, f"Local delete of {key} record {record_id}"):
            items = self._load_local_items(key, default)
            remaining = [item for item in items if _stored_id(item) != record_id]
            self._store_local(key, remaining)

    # =========================================================================
    # POSTS
    # =========================================================================

    def list_posts(self) -> List[Post]:
        """Posts, newest first."""
        return self._fetch(
            self.POSTS_KEY,
            lambda rows: [Post.from_dict(row) for row in rows],
            Post.from_dict,
            list,
            order=self.NEWEST_FIRST,
        )

    def save_post(self, post: Post) -> bool:
        """Create or replace a post by id. Returns True if saved remotely."""
        return self._save(
            self.POSTS_KEY,
            post,
            post.to_dict(),
            list,
            on_insert=lambda p: dataclasses.replace(p, created_at=now_ms()),
        )

    def delete_post(self, post_id: str) -> None:
        self._delete(self.POSTS_KEY, post_id, list)

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    def _default_categories(self) -> List[Category]:
        return [Category(id=i, name=n, slug=s) for i, n, s in self.DEFAULT_CATEGORIES]

    def list_categories(self) -> List[Category]:
        """Categories in insertion order."""
        return self._fetch(
            self.CATEGORIES_KEY,
            lambda rows: [Category.from_dict(row) for row in rows],
            Category.from_dict,
            self._default_categories,
        )

    def save_category(self, category: Category) -> bool:
        """Create or replace a category by id. Returns True if saved remotely."""
        return self._save(
            self.CATEGORIES_KEY,
            category,
            category.to_dict(),
            self._default_categories,
            on_insert=lambda c: c,
            prepend=False,
        )

    def add_category(self, name: str) -> Category:
        """Create a category from a display name; the slug is derived."""
        category = Category.create(name)
        self.save_category(category)
        return category

    def delete_category(self, category_id: str) -> None:
        self._delete(
            self.CATEGORIES_KEY,
            category_id,
            self._default_categories,
        )

    # =========================================================================
    # COMMUNITY MESSAGES
    # =========================================================================

    def list_messages(self) -> List[CommunityMessage]:
        """Community messages, newest first."""
        return self._fetch(
            self.MESSAGES_KEY,
            rows_to_messages,
            CommunityMessage.from_dict,
            list,
            order=self.NEWEST_FIRST,
        )

    def save_message(self, message: CommunityMessage) -> bool:
        """Create or replace a message by id. Returns True if saved remotely."""
        return self._save(
            self.MESSAGES_KEY,
            message,
            message_to_row(message),
            list,
            on_insert=lambda m: dataclasses.replace(m, timestamp=now_ms()),
        )

    def delete_message(self, message_id: str) -> None:
        self._delete(self.MESSAGES_KEY, message_id, list)

    # =========================================================================
    # SINGLETON CONFIGURATION
    # =========================================================================

    def get_config(self) -> StudioConfig:
        """Subscriber count and monetization settings, from the local store only."""
        raw_monetization = self.local_store.get(self.MONETIZATION_KEY, None)
        monetization = MonetizationConfig()
        if raw_monetization is not None:
            try:
                monetization = MonetizationConfig.from_dict(raw_monetization)
            except RecordValidationError as e:
                logger.warning(f"Local monetization settings are malformed, using defaults: {e}")

        subs = self.local_store.get(self.SUBS_KEY, self.default_subs)
        if not isinstance(subs, int) or isinstance(subs, bool):
            logger.warning(f"Local subscriber count {subs!r} is not an integer, using default")
            subs = self.default_subs

        return StudioConfig(subs=subs, monetization=monetization)

    def save_config(self, subs: int, monetization: MonetizationConfig) -> None:
        """Persist both singletons and the legacy subscriber mirror in one transaction."""
        with ErrorContext("Saving studio configuration"):
            self.local_store.set_many(
                {
                    self.SUBS_KEY: subs,
                    self.MONETIZATION_KEY: monetization.to_dict(),
                },
                raw_values={self.legacy_subs_key: str(subs)},
            )


def _stored_id(item: Any) -> Optional[str]:
    """Id of a stored entry, whatever its shape; None when it has none."""
    if isinstance(item, dict) and item.get("id") is not None:
        return str(item["id"])
    return None
