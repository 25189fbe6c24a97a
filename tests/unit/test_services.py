"""
Unit Tests - Gallery, Analytics, Orders and Admin Sessions
"""
import pytest
from datetime import timedelta

from bakery.models import format_order_id
from bakery.storage.admin_sessions import AdminSessionManager
from bakery.storage.analytics import (
    ORDER_PLACED,
    PAGE_VISIT,
    AnalyticsRecorder,
)
from bakery.storage.gallery import GALLERY_CACHE_KEY, GalleryRegistry, parse_image_id
from bakery.storage.orders import OrderLedger, OrderValidationError, parse_order_id
from bakery.storage.snapshot import SnapshotStore


def add(gallery: GalleryRegistry, name: str):
    return gallery.add_image(name, name, "admin", 1024, "image/jpeg")


def dumped(images):
    return [image.to_json() for image in images]


class TestGalleryRegistry:
    """Tests for GalleryRegistry"""

    @pytest.fixture
    def gallery(self, store, cache):
        return GalleryRegistry(store, cache)

    def test_add_image_builds_record(self, gallery, store):
        image = add(gallery, "cake.jpg")

        assert image.url == "/uploads/cake.jpg"
        assert image.views == 0
        assert image.is_public is True
        assert store.images == [image]

    def test_ids_unique_within_one_tick(self, gallery):
        ids = [add(gallery, f"{i}.jpg").id for i in range(5)]

        assert len(set(ids)) == 5
        assert ids == sorted(ids)

    def test_deleted_ids_are_not_reused(self, gallery):
        first = add(gallery, "a.jpg")
        gallery.remove_image(first.id)

        second = add(gallery, "b.jpg")

        assert second.id > first.id

    def test_public_images_newest_first(self, gallery, clock):
        add(gallery, "t1.jpg")
        clock.advance(seconds=1)
        add(gallery, "t2.jpg")
        clock.advance(seconds=1)
        add(gallery, "t3.jpg")

        names = [image.filename for image in gallery.get_public_images()]

        assert names == ["t3.jpg", "t2.jpg", "t1.jpg"]

    def test_equal_timestamps_keep_insertion_order(self, gallery, clock):
        add(gallery, "old.jpg")
        clock.advance(seconds=1)
        add(gallery, "first.jpg")
        add(gallery, "second.jpg")

        names = [image.filename for image in gallery.get_public_images()]

        assert names == ["first.jpg", "second.jpg", "old.jpg"]

    def test_non_public_images_are_hidden(self, gallery, store):
        add(gallery, "shown.jpg")
        hidden = add(gallery, "hidden.jpg")
        hidden.is_public = False

        assert [image.filename for image in gallery.get_public_images()] == ["shown.jpg"]

    def test_cache_hit_equals_fresh_computation(self, gallery, clock):
        for i in range(4):
            add(gallery, f"{i}.jpg")
            clock.advance(seconds=i % 2)
        gallery.increment_image_views("2.jpg")

        fresh = gallery.get_public_images()
        cached = gallery.list_public_images()

        assert gallery.cache.get(GALLERY_CACHE_KEY) is not None
        assert dumped(cached) == dumped(fresh)

    def test_cache_miss_equals_disabled_cache(self, gallery, store, clock):
        add(gallery, "a.jpg")
        clock.advance(seconds=2)
        add(gallery, "b.jpg")
        clock.advance(minutes=20)

        uncached = GalleryRegistry(store, cache=None).list_public_images()
        after_miss = gallery.list_public_images()

        assert dumped(after_miss) == dumped(uncached)
        assert dumped(gallery.list_public_images()) == dumped(uncached)

    def test_mutations_refresh_cache(self, gallery):
        image = add(gallery, "a.jpg")
        gallery.increment_image_views("a.jpg")

        cached = gallery.list_public_images()
        assert cached[0].views == 1

        gallery.remove_image(image.id)
        assert gallery.list_public_images() == []

    def test_increment_views_on_missing_file(self, gallery, store):
        add(gallery, "a.jpg")

        assert gallery.increment_image_views("missing.jpg") == 0
        assert len(store.images) == 1
        assert store.images[0].views == 0

    def test_increment_views(self, gallery):
        add(gallery, "a.jpg")

        assert gallery.increment_image_views("a.jpg") == 1
        assert gallery.increment_image_views("a.jpg") == 2

    def test_remove_missing_image(self, gallery):
        add(gallery, "a.jpg")

        assert gallery.remove_image(12345) is None
        assert len(gallery) == 1

    def test_remove_existing_image(self, gallery):
        keep = add(gallery, "keep.jpg")
        drop = add(gallery, "drop.jpg")

        removed = gallery.remove_image(drop.id)

        assert removed.filename == "drop.jpg"
        assert len(gallery) == 1
        assert gallery.get_image(keep.id) is not None
        assert not gallery.has_filename("drop.jpg")

    def test_parse_image_id(self):
        assert parse_image_id("1717243200000") == 1717243200000
        assert parse_image_id("abc") is None
        assert parse_image_id("-5") is None
        assert parse_image_id("9" * 5000) is None

    def test_list_filenames(self, gallery, clock):
        add(gallery, "a.jpg")
        clock.advance(seconds=1)
        add(gallery, "b.jpg")

        assert gallery.list_filenames() == ["b.jpg", "a.jpg"]


class TestAnalyticsRecorder:
    """Tests for AnalyticsRecorder"""

    def test_track_event(self, store):
        recorder = AnalyticsRecorder(store)

        event = recorder.track_event(PAGE_VISIT, {"page": "/"})

        assert event.type == PAGE_VISIT
        assert event.data == {"page": "/"}
        assert len(recorder) == 1

    def test_bounded_retention(self, clock):
        store = SnapshotStore(None, clock=clock)
        recorder = AnalyticsRecorder(store, memory_limit=10000)

        for i in range(10050):
            recorder.track_event(PAGE_VISIT, {"n": i})

        assert len(store.analytics) == 10000
        assert store.analytics[0].data["n"] == 50
        assert store.analytics[-1].data["n"] == 10049

        persisted = store.to_payload()["analytics"]
        assert len(persisted) == 5000
        assert persisted[0]["data"]["n"] == 5050
        assert persisted[-1]["data"]["n"] == 10049

    def test_stats_only_count_retained_window(self, clock):
        store = SnapshotStore(None, clock=clock)
        recorder = AnalyticsRecorder(store, memory_limit=3)
        recorder.track_event(ORDER_PLACED)
        for _ in range(3):
            recorder.track_event(PAGE_VISIT)

        stats = recorder.get_stats()

        assert stats.total_orders == 0
        assert stats.total_page_visits == 3
        assert stats.total_events == 3

    def test_today_counters(self, store, clock):
        recorder = AnalyticsRecorder(store)
        recorder.track_event(PAGE_VISIT)
        recorder.track_event(ORDER_PLACED)
        clock.advance(days=2)
        recorder.track_event(PAGE_VISIT)

        stats = recorder.get_stats()

        assert stats.total_page_visits == 2
        assert stats.today_page_visits == 1
        assert stats.total_orders == 1
        assert stats.today_orders == 0
        assert stats.events_by_type == {PAGE_VISIT: 2, ORDER_PLACED: 1}

    def test_recent_events_newest_first(self, store):
        recorder = AnalyticsRecorder(store)
        for page in ("a", "b", "c"):
            recorder.track_event(PAGE_VISIT, {"page": page})

        recent = recorder.recent_events(2)

        assert [event.data["page"] for event in recent] == ["c", "b"]


class TestOrderLedger:
    """Tests for OrderLedger"""

    @pytest.fixture
    def ledger(self, store):
        return OrderLedger(store)

    def test_total_amount_derivation(self, ledger):
        order = ledger.add_order(
            "Ann", "ann@example.com", "555-0100",
            [{"name": "Cake", "price": 100, "quantity": 2}, {"name": "Tart", "price": 50, "quantity": 1}],
        )

        assert order.total_amount == 250
        assert order.status.value == "pending"

    def test_order_id_format(self):
        assert format_order_id(7) == "WD0007"
        assert format_order_id(12345) == "WD12345"

    def test_ids_allocated_from_counter(self, ledger, store):
        first = ledger.add_order("Ann", "a@example.com", "1")
        second = ledger.add_order("Bob", "b@example.com", "2")

        assert (first.id, second.id) == (1, 2)
        assert first.order_id == "WD0001"
        assert store.order_id_counter == 3

    @pytest.mark.parametrize("field", ["customer_name", "email", "phone"])
    def test_missing_required_field(self, ledger, store, field):
        values = {"customer_name": "Ann", "email": "a@example.com", "phone": "1"}
        values[field] = "  "

        with pytest.raises(OrderValidationError):
            ledger.add_order(**values)

        assert store.orders == []
        assert store.order_id_counter == 1

    def test_get_order_by_external_id(self, ledger):
        order = ledger.add_order("Ann", "a@example.com", "1")

        assert ledger.get_order("WD0001") == order
        assert ledger.get_order("wd1") == order
        assert ledger.get_order("WD0002") is None
        assert ledger.get_order("nonsense") is None

    def test_parse_order_id(self):
        assert parse_order_id("WD0007") == 7
        assert parse_order_id("42") == 42
        assert parse_order_id("WDX") is None
        assert parse_order_id("WD" + "9" * 4400) is None

    def test_list_orders_most_recent_first(self, ledger):
        for name in ("a", "b", "c"):
            ledger.add_order(name, f"{name}@example.com", "1")

        assert [order.customer_name for order in ledger.list_orders(2)] == ["c", "b"]
        assert len(ledger.list_orders()) == 3


class TestAdminSessionManager:
    """Tests for AdminSessionManager"""

    @pytest.fixture
    def sessions(self, clock):
        return AdminSessionManager(max_age=timedelta(hours=2), clock=clock)

    def test_create_returns_unique_ids(self, sessions):
        first = sessions.create("admin")
        second = sessions.create("admin")

        assert first != second
        assert len(first) >= 32

    def test_valid_just_before_expiry(self, sessions, clock):
        session_id = sessions.create("admin", ip="127.0.0.1")
        clock.advance(hours=1, minutes=59)

        assert sessions.is_valid(session_id)
        sessions.sweep()
        assert sessions.is_valid(session_id)
        assert sessions.get(session_id).ip == "127.0.0.1"

    def test_invalid_just_after_expiry(self, sessions, clock):
        session_id = sessions.create("admin")
        clock.advance(hours=2, minutes=1)

        assert not sessions.is_valid(session_id)
        sessions.sweep()
        assert not sessions.is_valid(session_id)
        assert len(sessions) == 0

    def test_revoke(self, sessions):
        session_id = sessions.create("admin")

        assert sessions.revoke(session_id) is True
        assert not sessions.is_valid(session_id)
        assert sessions.revoke(session_id) is False

    def test_unknown_session(self, sessions):
        assert not sessions.is_valid("nope")
        assert not sessions.is_valid(None)
