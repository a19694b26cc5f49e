# =============================================================================
# studio_core/offline/local_store.py
# Local SQLite key/value store for offline operation
# =============================================================================
"""
LocalStore - durable JSON key/value storage on a local SQLite file.

Features:
- Keys namespaced as {app_prefix}_{schema_version}_{name}
- Corrupt payloads read back as "absent", never as an error
- Multi-key writes in a single transaction
- ChangeNotifier fired after every committed write
- Thread-local connections
"""

from __future__ import annotations
import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from studio_core.errors import LocalStoreError
from studio_core.logging import get_logger
from studio_core.offline.change_notifier import ChangeNotifier

logger = get_logger(__name__)


class LocalStore:
    """
    Local key/value store that survives process restarts.

    Usage:
        store = LocalStore(Path("local_data/studio.db"))
        store.set("posts", [...])
        posts = store.get("posts", [])
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        app_prefix: str = "richacks",
        schema_version: str = "v3",
        notifier: Optional[ChangeNotifier] = None,
    ):
        """
        Initialize local store.

        Args:
            db_path: Path to SQLite database file
            app_prefix: Application part of the key namespace
            schema_version: Version part of the key namespace
            notifier: ChangeNotifier fired after writes (a new one if omitted)
        """
        self.db_path = Path(db_path)
        self.app_prefix = app_prefix
        self.schema_version = schema_version
        self.notifier = notifier or ChangeNotifier()
        self._local = threading.local()
        self._schema_lock = threading.Lock()
        self._initialized = False
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Ensure database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if getattr(self._local, "connection", None) is None:
            self._local.connection = sqlite3.connect(str(self.db_path), timeout=10)
            self._local.connection.row_factory = sqlite3.Row
        self._initialize(self._local.connection)
        return self._local.connection

    def _initialize(self, conn: sqlite3.Connection) -> None:
        if self._initialized:
            return
        with self._schema_lock:
            if not self._initialized:
                conn.execute(self.SCHEMA)
                conn.commit()
                self._initialized = True
                logger.info(f"Local store initialized at: {self.db_path}")

    @contextmanager
    def transaction(self):
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def namespaced(self, name: str) -> str:
        """Full storage key for a logical name."""
        return f"{self.app_prefix}_{self.schema_version}_{name}"

    # =========================================================================
    # RAW ACCESS
    # =========================================================================

    def get_raw(self, key: str) -> Optional[str]:
        """Stored text under an exact key, or None."""
        try:
            row = self._get_connection().execute(
                "SELECT value FROM kv_store WHERE key = ?", [key]
            ).fetchone()
        except sqlite3.Error as e:
            raise LocalStoreError(f"Read failed: {e}", key=key) from e
        return row["value"] if row else None

    def set_raw(self, key: str, text: str) -> None:
        """Store text under an exact key and notify listeners."""
        self._write({key: text})

    def _write(self, items: Dict[str, str]) -> None:
        """Write every key in one transaction, then notify once per key."""
        now = datetime.now().isoformat()
        try:
            with self.transaction() as conn:
                for key, text in items.items():
                    conn.execute(
                        """
                        INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                        VALUES (?, ?, ?)
                        """,
                        [key, text, now]
                    )
        except sqlite3.Error as e:
            raise LocalStoreError(f"Write failed: {e}", key=", ".join(items)) from e

        for key in items:
            self.notifier.notify(key)

    # =========================================================================
    # JSON VALUES
    # =========================================================================

    def get(self, name: str, default: Any = None) -> Any:
        """
        Decoded value for a logical name.

        Returns default when the key is absent, the payload is not valid
        JSON, or the database cannot be read.
        """
        key = self.namespaced(name)
        try:
            text = self.get_raw(key)
        except LocalStoreError as e:
            logger.warning(f"Local read failed, using default: {e}")
            return default

        if text is None:
            return default

        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning(f"Corrupt payload under {key}, using default")
            return default

    def _dumps(self, key: str, value: Any) -> str:
        try:
            return json.dumps(value)
        except (TypeError, ValueError) as e:
            raise LocalStoreError(f"Value is not serializable: {e}", key=key) from e

    def set(self, name: str, value: Any) -> None:
        """
        Serialize and persist a value under a logical name.

        Raises:
            LocalStoreError: If the value is not JSON-serializable or the
                write fails
        """
        key = self.namespaced(name)
        self._write({key: self._dumps(key, value)})

    def set_many(
        self,
        values: Dict[str, Any],
        raw_values: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Persist several values atomically: either all are written or none.

        Args:
            values: Logical name -> JSON-serializable value
            raw_values: Exact key -> text, stored without namespacing

        Raises:
            LocalStoreError: If a value is not serializable or the write fails
        """
        items = {}
        for name, value in values.items():
            key = self.namespaced(name)
            items[key] = self._dumps(key, value)
        items.update(raw_values or {})
        self._write(items)

    def close(self) -> None:
        """Close this thread's database connection."""
        if getattr(self._local, "connection", None) is not None:
            self._local.connection.close()
            self._local.connection = None
