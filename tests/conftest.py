# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import sqlite3

import pytest
from typing import Callable, List, Optional, Tuple
from unittest.mock import MagicMock

from studio_core.models import Category, CommunityMessage, MessageType, Post
from studio_core.offline import (
    FailureKind,
    LocalStore,
    RemoteGateway,
    RemoteResult,
    UnifiedDataService,
)


# =============================================================================
# GATEWAY STUBS
# =============================================================================

class StubGateway(RemoteGateway):
    """RemoteGateway whose responses come from a callable instead of HTTP."""

    def __init__(self, responder: Callable[[str, str, Optional[dict]], RemoteResult]):
        super().__init__("https://stub.supabase.co", api_key="test-key", session=MagicMock())
        self.responder = responder
        self.calls: List[Tuple[str, str, Optional[dict]]] = []

    def request(self, path, method="GET", body=None):
        self.calls.append((method, path, body))
        return self.responder(method, path, body)


def unavailable(method, path, body):
    return RemoteResult.fail(FailureKind.TRANSPORT, "connection refused")


def accepting(rows_by_resource=None):
    """Responder that serves fixed rows on GET and echoes POST bodies."""
    rows_by_resource = rows_by_resource or {}

    def respond(method, path, body):
        resource = path.split("?")[0]
        if method == "GET":
            return RemoteResult.ok(rows_by_resource.get(resource, []))
        if method == "POST":
            return RemoteResult.ok([body])
        return RemoteResult.ok(None)

    return respond


class FailOnNthInsert:
    """sqlite3 connection wrapper whose Nth INSERT fails like a full disk."""

    def __init__(self, conn, fail_at: int):
        self.conn = conn
        self.fail_at = fail_at
        self.inserts = 0

    def execute(self, sql, params=()):
        if sql.lstrip().startswith("INSERT"):
            self.inserts += 1
            if self.inserts == self.fail_at:
                raise sqlite3.OperationalError("disk I/O error")
        return self.conn.execute(sql, params)

    def commit(self):
        self.conn.commit()

    def rollback(self):
        self.conn.rollback()


@pytest.fixture
def local_store(tmp_path):
    """Empty local store on a temporary SQLite file"""
    store = LocalStore(tmp_path / "studio.db")
    yield store
    store.close()


@pytest.fixture
def offline_gateway():
    """Gateway that always reports a transport failure"""
    return StubGateway(unavailable)


@pytest.fixture
def online_gateway():
    """Gateway that accepts every write and serves empty lists"""
    return StubGateway(accepting())


@pytest.fixture
def offline_service(local_store, offline_gateway):
    """Service whose remote tier is down"""
    return UnifiedDataService(local_store, offline_gateway)


@pytest.fixture
def online_service(local_store, online_gateway):
    """Service whose remote tier accepts everything"""
    return UnifiedDataService(local_store, online_gateway)


# =============================================================================
# SAMPLE RECORDS
# =============================================================================

@pytest.fixture
def make_post():
    """Factory for posts with sensible defaults"""
    def _make(post_id: str, title: Optional[str] = None, **kwargs) -> Post:
        return Post(
            id=post_id,
            title=title or f"Post {post_id}",
            description="Setup guide",
            category="pc",
            date="2024-05-01",
            **kwargs,
        )
    return _make


@pytest.fixture
def sample_message():
    return CommunityMessage(
        id="m1",
        user="pixelqueen",
        type=MessageType.COLAB,
        message="Anyone up for a collab stream?",
        date="01/05/2024, 12:00:00",
        timestamp=1714564800000,
        audio_url="https://cdn.example.com/a.mp3",
    )


@pytest.fixture
def sample_category():
    return Category(id="3", name="Retro Games", slug="retro-games")


@pytest.fixture
def stub_gateway():
    """Factory: StubGateway(responder)"""
    return StubGateway


@pytest.fixture
def accepting_responder():
    """Factory: responder serving the given {resource: rows} on GET"""
    return accepting


@pytest.fixture
def fail_insert_number(local_store, monkeypatch):
    """Arm local_store so that its Nth INSERT from now on raises"""
    def _arm(fail_at: int) -> FailOnNthInsert:
        failing = FailOnNthInsert(local_store._get_connection(), fail_at)
        monkeypatch.setattr(local_store, "_get_connection", lambda: failing)
        return failing
    return _arm
