# =============================================================================
# tests/unit/test_unified_data_service.py
# Unit Tests for UnifiedDataService
# =============================================================================

import threading
from unittest.mock import MagicMock

import pytest

from studio_core.errors import LocalStoreError
from studio_core.models import AdNetwork, Category, MonetizationConfig, StudioConfig
from studio_core.offline import (
    FailureKind,
    RemoteGateway,
    RemoteResult,
    UnifiedDataService,
)
from studio_core.offline import unified_data_service as uds_module


FIXED_NOW = 1_700_000_000_000


@pytest.fixture
def frozen_clock(monkeypatch):
    monkeypatch.setattr(uds_module, "now_ms", lambda: FIXED_NOW)
    return FIXED_NOW


def post_rows(*ids):
    return [
        {"id": i, "title": f"Post {i}", "description": "d", "category": "pc", "date": "2024-05-01"}
        for i in ids
    ]


# =============================================================================
# READS
# =============================================================================

class TestListFallback:
    """Remote-first reads with local fallback"""

    def test_offline_list_returns_local_value(self, offline_service, local_store):
        """With the remote down, list returns exactly what is stored locally"""
        local_store.set("posts", post_rows("b", "a"))

        posts = offline_service.list_posts()

        assert [p.to_dict() for p in posts] == post_rows("b", "a")

    def test_offline_list_empty_store(self, offline_service):
        assert offline_service.list_posts() == []
        assert offline_service.list_messages() == []

    def test_remote_rows_returned_unmodified(self, stub_gateway, accepting_responder, local_store):
        """A remote array is authoritative and returned as-is"""
        rows = post_rows("r2", "r1")
        service = UnifiedDataService(local_store, stub_gateway(accepting_responder({"posts": rows})))
        local_store.set("posts", post_rows("local"))

        posts = service.list_posts()

        assert [p.to_dict() for p in posts] == rows

    def test_remote_read_not_written_back(self, stub_gateway, accepting_responder, local_store):
        service = UnifiedDataService(
            local_store, stub_gateway(accepting_responder({"posts": post_rows("r1")}))
        )

        service.list_posts()

        assert local_store.get_raw(local_store.namespaced("posts")) is None

    def test_remote_query_orders_newest_first(self, online_service, online_gateway):
        online_service.list_posts()
        online_service.list_messages()

        paths = [path for _, path, _ in online_gateway.calls]
        assert paths == [
            "posts?select=*&order=created_at.desc",
            "community_messages?select=*&order=created_at.desc",
        ]

    def test_non_array_remote_payload_falls_back(self, stub_gateway, local_store):
        service = UnifiedDataService(
            local_store, stub_gateway(lambda m, p, b: RemoteResult.ok({"message": "hi"}))
        )
        local_store.set("posts", post_rows("a"))

        assert [p.id for p in service.list_posts()] == ["a"]

    def test_malformed_remote_rows_fall_back(self, stub_gateway, local_store):
        service = UnifiedDataService(
            local_store, stub_gateway(lambda m, p, b: RemoteResult.ok([{"id": "x"}]))
        )
        local_store.set("posts", post_rows("a"))

        assert [p.id for p in service.list_posts()] == ["a"]

    def test_corrupt_local_collection_yields_default(self, offline_service, local_store):
        local_store.set_raw(local_store.namespaced("posts"), "[{broken")

        assert offline_service.list_posts() == []

    def test_local_collection_of_wrong_shape_yields_default(self, offline_service, local_store):
        local_store.set("posts", {"not": "a list"})
        local_store.set("messages", [{"id": "m1"}])

        assert offline_service.list_posts() == []
        assert offline_service.list_messages() == []

    def test_malformed_local_record_is_skipped(self, offline_service, local_store):
        """One bad entry does not hide the rest of the collection"""
        local_store.set("posts", post_rows("a") + [{"id": "legacy", "title": "No body"}] + post_rows("b"))

        assert [p.id for p in offline_service.list_posts()] == ["a", "b"]

    def test_missing_credential_never_touches_network(self, local_store):
        session = MagicMock()
        service = UnifiedDataService(
            local_store, RemoteGateway("https://demo.supabase.co", api_key="", session=session)
        )
        local_store.set("posts", post_rows("a"))

        assert [p.id for p in service.list_posts()] == ["a"]
        session.request.assert_not_called()

    def test_remote_messages_are_translated(self, stub_gateway, accepting_responder, local_store):
        rows = [{
            "id": "m1",
            "user_name": "pixelqueen",
            "type": "ERROR",
            "message": "Link is down",
            "audio_url": None,
            "image_url": None,
            "created_at": "2024-05-01T12:00:00+00:00",
        }]
        service = UnifiedDataService(
            local_store, stub_gateway(accepting_responder({"community_messages": rows}))
        )

        messages = service.list_messages()

        assert messages[0].user == "pixelqueen"
        assert messages[0].timestamp == 1714564800000


# =============================================================================
# WRITES
# =============================================================================

class TestSaveExclusivity:
    """Remote success leaves the local store alone"""

    def test_remote_success_skips_local_write(self, online_service, local_store, make_post):
        local_store.set("posts", post_rows("a"))
        before = local_store.get_raw(local_store.namespaced("posts"))
        events = []
        online_service.subscribe(events.append)

        synced = online_service.save_post(make_post("new"))

        assert synced is True
        assert local_store.get_raw(local_store.namespaced("posts")) == before
        assert events == []

    def test_remote_receives_local_shape(self, online_service, online_gateway, make_post):
        post = make_post("p1", video_url="https://youtu.be/x")

        online_service.save_post(post)

        assert online_gateway.calls[-1] == ("POST", "posts", post.to_dict())

    def test_message_sent_in_remote_shape(self, online_service, online_gateway, sample_message):
        online_service.save_message(sample_message)

        method, path, body = online_gateway.calls[-1]
        assert (method, path) == ("POST", "community_messages")
        assert body["user_name"] == "pixelqueen"
        assert body["audio_url"] == "https://cdn.example.com/a.mp3"


class TestSaveFallback:
    """Local upsert when the remote write fails"""

    def test_new_post_prepended_and_stamped(self, offline_service, local_store, make_post, frozen_clock):
        local_store.set("posts", post_rows("a", "b"))

        synced = offline_service.save_post(make_post("c"))

        stored = local_store.get("posts")
        assert synced is False
        assert [p["id"] for p in stored] == ["c", "a", "b"]
        assert stored[0]["createdAt"] == frozen_clock

    def test_existing_post_replaced_in_place(self, offline_service, local_store, make_post):
        local_store.set("posts", post_rows("a", "b", "c"))

        offline_service.save_post(make_post("b", title="Updated"))

        stored = local_store.get("posts")
        assert [p["id"] for p in stored] == ["a", "b", "c"]
        assert stored[1]["title"] == "Updated"
        assert "createdAt" not in stored[1]

    def test_caller_record_not_mutated(self, offline_service, make_post):
        post = make_post("p1")

        offline_service.save_post(post)

        assert post.created_at is None

    def test_new_message_prepended_with_timestamp(
        self, offline_service, local_store, sample_message, frozen_clock
    ):
        offline_service.save_message(sample_message)

        messages = offline_service.list_messages()
        assert messages[0].id == "m1"
        assert messages[0].timestamp == frozen_clock

    def test_save_fires_one_change_event(self, offline_service, make_post):
        events = []
        offline_service.subscribe(events.append)

        offline_service.save_post(make_post("p1"))

        assert [e.key for e in events] == ["richacks_v3_posts"]

    def test_local_write_failure_is_absorbed(self, offline_service, local_store, make_post, monkeypatch):
        def locked(name, value):
            raise LocalStoreError("database is locked", key=name)

        monkeypatch.setattr(local_store, "set", locked)

        assert offline_service.save_post(make_post("p1")) is False

    def test_unconfirmed_remote_insert_falls_back(self, local_store, make_post):
        """A 2xx reply that echoes nothing back is not a remote save"""
        session = MagicMock()
        session.request.return_value = MagicMock(ok=True, status_code=201, content=b"")
        service = UnifiedDataService(
            local_store, RemoteGateway("https://demo.supabase.co", api_key="anon-key", session=session)
        )

        synced = service.save_post(make_post("p1"))

        assert synced is False
        assert [p["id"] for p in local_store.get("posts")] == ["p1"]

    def test_listener_may_write_same_collection(self, offline_service, make_post):
        """A change listener saving into the collection being written does not block"""
        def follow_up(event):
            if not any(p.id == "echo" for p in offline_service.list_posts()):
                offline_service.save_post(make_post("echo"))

        offline_service.subscribe(follow_up)
        worker = threading.Thread(
            target=offline_service.save_post, args=(make_post("p1"),), daemon=True
        )
        worker.start()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert sorted(p.id for p in offline_service.list_posts()) == ["echo", "p1"]

    def test_concurrent_saves_do_not_lose_updates(self, offline_service, make_post):
        """Parallel writers on one collection are serialized per key"""
        threads = [
            threading.Thread(target=offline_service.save_post, args=(make_post(f"p{i}"),))
            for i in range(12)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(p.id for p in offline_service.list_posts()) == sorted(f"p{i}" for i in range(12))


# =============================================================================
# DELETES
# =============================================================================

class TestDelete:

    def test_delete_nonexistent_is_noop(self, offline_service, local_store):
        local_store.set("posts", post_rows("a", "b"))

        result = offline_service.delete_post("zzz")

        assert result is None
        assert local_store.get("posts") == post_rows("a", "b")

    def test_delete_existing_matches_outcome(self, offline_service, local_store):
        local_store.set("posts", post_rows("a", "b"))

        result = offline_service.delete_post("a")

        assert result is None
        assert local_store.get("posts") == post_rows("b")

    def test_delete_touches_both_tiers(self, online_service, online_gateway, local_store):
        """Remote success does not stop the local filter"""
        local_store.set("posts", post_rows("a", "b"))

        online_service.delete_post("a")

        assert ("DELETE", "posts?id=eq.a", None) in online_gateway.calls
        assert [p["id"] for p in local_store.get("posts")] == ["b"]

    def test_delete_message(self, offline_service, sample_message):
        offline_service.save_message(sample_message)

        offline_service.delete_message("m1")

        assert offline_service.list_messages() == []


# =============================================================================
# CATEGORIES
# =============================================================================

class TestCategories:

    def test_defaults_when_nothing_stored(self, offline_service):
        categories = offline_service.list_categories()

        assert [(c.id, c.slug) for c in categories] == [("1", "pc"), ("2", "android")]

    def test_add_category_offline_appends(self, offline_service):
        created = offline_service.add_category("Xbox Series X")

        categories = offline_service.list_categories()
        assert created.slug == "xbox-series-x"
        assert [c.slug for c in categories] == ["pc", "android", "xbox-series-x"]

    def test_add_category_online_sends_row(self, online_service, online_gateway):
        created = online_service.add_category("Nintendo Switch")

        assert online_gateway.calls[-1] == ("POST", "categories", created.to_dict())

    def test_save_category_replaces_by_id(self, offline_service, sample_category):
        offline_service.save_category(sample_category)
        offline_service.save_category(Category(id="3", name="Retro", slug="retro"))

        categories = offline_service.list_categories()
        assert [c.name for c in categories] == ["PC", "Android", "Retro"]

    def test_delete_unknown_category_keeps_defaults(self, offline_service):
        offline_service.delete_category("999")

        assert [c.id for c in offline_service.list_categories()] == ["1", "2"]




# =============================================================================
# LOCAL COLLECTION PRESERVATION
# =============================================================================

class TestUnparseableEntriesSurviveWrites:
    """Local writes only touch the entry with the given id"""

    LEGACY_POST = {"id": "legacy", "title": "Old post without a description"}

    def test_offline_save_keeps_unparseable_entries(self, offline_service, local_store, make_post):
        local_store.set("posts", post_rows("a", "b") + [self.LEGACY_POST])

        offline_service.save_post(make_post("c"))

        stored = local_store.get("posts")
        assert [p["id"] for p in stored] == ["c", "a", "b", "legacy"]
        assert stored[-1] == self.LEGACY_POST

    def test_offline_save_replaces_only_matching_entry(self, offline_service, local_store, make_post):
        local_store.set("posts", [self.LEGACY_POST] + post_rows("a"))

        offline_service.save_post(make_post("a", title="Updated"))

        stored = local_store.get("posts")
        assert stored[0] == self.LEGACY_POST
        assert stored[1]["title"] == "Updated"

    def test_delete_keeps_user_categories(self, offline_service, local_store):
        stored = [{"id": "5", "name": "Retro", "slug": "retro"}, {"id": "6", "name": "Odd"}]
        local_store.set("categories", stored)

        offline_service.delete_category("nope")

        assert local_store.get("categories") == stored
        assert [c.id for c in offline_service.list_categories()] == ["5"]

    def test_delete_removes_entry_with_numeric_id(self, offline_service, local_store):
        local_store.set("categories", [{"id": 5, "name": "Retro", "slug": "retro"}, {"id": "6", "name": "Odd"}])

        offline_service.delete_category("5")

        assert local_store.get("categories") == [{"id": "6", "name": "Odd"}]

    def test_remote_numeric_ids_are_accepted(self, stub_gateway, accepting_responder, local_store):
        rows = [{"id": 7, "name": "Retro", "slug": "retro"}]
        service = UnifiedDataService(local_store, stub_gateway(accepting_responder({"categories": rows})))

        assert [c.id for c in service.list_categories()] == ["7"]
# =============================================================================
# SINGLETON CONFIGURATION
# =============================================================================

class TestConfig:

    def test_default_config(self, offline_service):
        config = offline_service.get_config()

        assert config == StudioConfig(subs=28, monetization=MonetizationConfig())
        assert config.monetization.active_network is AdNetwork.NONE

    def test_round_trip(self, local_store):
        """No remote configured at all"""
        service = UnifiedDataService(local_store, RemoteGateway("https://demo.supabase.co"))
        monetization = MonetizationConfig(
            moneytizer_id="mt-1", adsterra_script="<script/>", active_network=AdNetwork.MIXED
        )

        service.save_config(42, monetization)

        assert service.get_config() == StudioConfig(subs=42, monetization=monetization)

    def test_config_never_hits_remote(self, online_service, online_gateway):
        online_service.save_config(5, MonetizationConfig())
        online_service.get_config()

        assert online_gateway.calls == []

    def test_legacy_subscriber_mirror(self, offline_service, local_store):
        offline_service.save_config(42, MonetizationConfig())

        assert local_store.get_raw("richacks_manual_subs") == "42"

    def test_failed_config_write_keeps_previous_pair(self, offline_service, local_store, fail_insert_number):
        """subs and monetization are written together or not at all"""
        old = MonetizationConfig(ezoic_id="ez-old", active_network=AdNetwork.EZOIC)
        offline_service.save_config(10, old)
        fail_insert_number(2)

        offline_service.save_config(42, MonetizationConfig(ezoic_id="ez-new"))

        assert offline_service.get_config() == StudioConfig(subs=10, monetization=old)
        assert local_store.get_raw("richacks_manual_subs") == "10"

    def test_malformed_values_fall_back_to_defaults(self, offline_service, local_store):
        local_store.set("monetization", {"activeNetwork": "ADSENSE"})
        local_store.set("subs", "lots")

        config = offline_service.get_config()

        assert config.subs == 28
        assert config.monetization == MonetizationConfig()


class TestStatus:

    def test_status_reports_configuration(self, offline_service, local_store):
        status = offline_service.get_status()

        assert status["remote_configured"] is True
        assert status["local_db"] == str(local_store.db_path)
        assert status["namespace"] == "richacks_v3_"

    def test_from_settings_builds_local_only_service(self, tmp_path):
        from studio_core.config import StoreSettings

        service = UnifiedDataService.from_settings(StoreSettings(db_path=tmp_path / "s.db"))

        assert not service.is_remote_configured
        assert service.list_posts() == []
        assert service.get_config().subs == 28

    def test_failure_kind_is_logged(self, offline_service, caplog):
        with caplog.at_level("WARNING"):
            offline_service.list_posts()

        assert FailureKind.TRANSPORT.value in caplog.text
