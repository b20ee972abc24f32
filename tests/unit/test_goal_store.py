"""
Tests for GoalStore: goal lifecycle, statistics, filtering and the
persistence synchronization contract.
"""

import json
import random
from datetime import date

import pytest

from bucket_list.database import Category, GoalStore, JsonFilePersistence, MemoryPersistence
from bucket_list.errors import NotFoundError, PersistenceError, ValidationError


def persisted(persistence):
    return json.loads(persistence.read())


class FailingWrites(MemoryPersistence):
    """Memory store whose writes start failing on demand."""

    fail = False

    def write(self, blob):
        if self.fail:
            raise PersistenceError("quota exceeded")
        super().write(blob)


# ── add ───────────────────────────────────────────────────────────────


class TestAdd:

    def test_add_assigns_id_and_timestamps(self, store, clock):
        item = store.add("Visit Japan", "travel", description="Cherry blossoms", progress=20)

        assert item.id
        assert item.created_at == clock.now
        assert item.updated_at == clock.now
        assert item.category is Category.TRAVEL
        assert item.completed is False
        assert store.items == [item]

    def test_add_persists_full_snapshot(self, store, persistence, clock):
        store.add("Run a marathon", "fitness")
        store.add("Learn Rust", "learning")

        snapshot = persisted(persistence)
        assert [entry["title"] for entry in snapshot] == ["Run a marathon", "Learn Rust"]
        assert snapshot[0]["category"] == "fitness"
        assert snapshot[0]["createdAt"] == clock.now.isoformat()
        assert snapshot[0]["deadline"] is None

    def test_huge_progress_is_clamped(self, store):
        assert store.add("Climb every peak", "adventure", progress=10 ** 400).progress == 100

    def test_returned_records_are_copies(self, store, persistence):
        item = store.add("Visit Japan", "travel", progress=10)
        item.progress = 7
        store.get(item.id).title = "Changed"
        store.items[0].completed = True
        store.filter_by_category("travel")[0].description = "Changed"
        store.update(item.id, progress=20).progress = 90

        kept = store.get(item.id)
        assert (kept.title, kept.progress, kept.completed, kept.description) == (
            "Visit Japan", 20, False, "")
        assert persisted(persistence)[0]["progress"] == 20

    def test_completed_defaults_from_progress(self, store):
        assert store.add("Write a novel", "creative", progress=100).completed is True
        assert store.add("Paint a mural", "creative", progress=95).completed is False

    def test_explicit_completed_is_kept(self, store):
        item = store.add("Climb Kilimanjaro", "adventure", progress=40, completed=True)
        assert item.completed is True
        assert item.progress == 40

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_empty_title_rejected(self, store, persistence, title):
        with pytest.raises(ValidationError):
            store.add(title, "travel")
        assert len(store) == 0
        assert persistence.write_count == 0

    def test_unknown_category_rejected(self, store):
        with pytest.raises(ValidationError):
            store.add("Buy a boat", "shopping")

    @pytest.mark.parametrize("raw, expected", [(-10, 0), (150, 100), (42, 40), (43, 45), (57.5, 60)])
    def test_progress_clamped_to_step(self, store, raw, expected):
        assert store.add("Learn piano", "learning", progress=raw).progress == expected

    def test_non_numeric_progress_rejected(self, store):
        with pytest.raises(ValidationError):
            store.add("Learn piano", "learning", progress="lots")

    def test_deadline_accepts_iso_string(self, store):
        item = store.add("See the aurora", "travel", deadline="2027-02-01")
        assert item.deadline == date(2027, 2, 1)

    def test_empty_deadline_means_none(self, store):
        assert store.add("See the aurora", "travel", deadline="").deadline is None


# ── update ────────────────────────────────────────────────────────────


class TestUpdate:

    def test_update_merges_fields_and_refreshes_timestamp(self, store, clock):
        created = clock.now
        item = store.add("Learn Spanish", "learning", progress=10)
        clock.advance(minutes=5)

        updated = store.update(item.id, progress=55, description="B1 level")

        assert updated.progress == 55
        assert updated.description == "B1 level"
        assert updated.title == "Learn Spanish"
        assert updated.created_at == created
        assert updated.updated_at == clock.now

    def test_update_persists(self, store, persistence):
        item = store.add("Learn Spanish", "learning")
        store.update(item.id, title="Learn Portuguese")
        assert persisted(persistence)[0]["title"] == "Learn Portuguese"

    def test_completed_is_not_rederived_from_progress(self, store):
        """The form passes completed explicitly; the store never recomputes it."""
        item = store.add("Start a business", "career", progress=30)

        store.update(item.id, completed=True)
        assert store.get(item.id).progress == 30
        assert store.get(item.id).completed is True

        store.update(item.id, progress=100, completed=False)
        assert store.get(item.id).completed is False

    def test_update_missing_id_leaves_state_untouched(self, store, persistence):
        store.add("Learn to surf", "adventure")
        writes = persistence.write_count
        before = persistence.read()

        with pytest.raises(NotFoundError):
            store.update("no-such-id", title="Anything")

        assert persistence.write_count == writes
        assert persistence.read() == before
        assert [i.title for i in store.items] == ["Learn to surf"]

    @pytest.mark.parametrize("field", ["id", "created_at", "createdAt", "colour"])
    def test_immutable_or_unknown_fields_rejected(self, store, field):
        item = store.add("Learn to surf", "adventure")
        with pytest.raises(ValidationError):
            store.update(item.id, **{field: "x"})

    def test_invalid_update_changes_nothing(self, store, persistence):
        item = store.add("Learn to surf", "adventure", progress=10)
        writes = persistence.write_count

        with pytest.raises(ValidationError):
            store.update(item.id, progress=50, title="")

        assert store.get(item.id).progress == 10
        assert persistence.write_count == writes

    def test_updated_at_never_before_created_at(self, store, clock):
        item = store.add("Learn to surf", "adventure")
        clock.advance(hours=-2)
        updated = store.update(item.id, progress=20)
        assert updated.updated_at == updated.created_at

    def test_clearing_deadline(self, store, tomorrow):
        item = store.add("Learn to surf", "adventure", deadline=tomorrow)
        store.update(item.id, deadline=None)
        assert store.get(item.id).deadline is None


# ── delete ────────────────────────────────────────────────────────────


class TestDelete:

    def test_delete_removes_from_collection_and_snapshot(self, store, persistence):
        keep = store.add("Keep me", "family")
        gone = store.add("Drop me", "family")

        assert store.delete(gone.id) is True

        assert store.items == [keep]
        assert [entry["id"] for entry in persisted(persistence)] == [keep.id]

    def test_delete_missing_id(self, store, persistence):
        store.add("Keep me", "family")
        writes = persistence.write_count
        with pytest.raises(NotFoundError):
            store.delete("missing")
        assert persistence.write_count == writes
        assert len(store) == 1


# ── toggle ────────────────────────────────────────────────────────────


class TestToggleComplete:
    """
    Completing a goal forces progress to 100 but reopening it leaves progress
    alone. This asymmetry is intended product behaviour, not a bug.
    """

    def test_completing_forces_progress_to_100(self, store):
        item = store.add("Skydive", "adventure", progress=35)
        toggled = store.toggle_complete(item.id)
        assert toggled.completed is True
        assert toggled.progress == 100

    def test_reopening_keeps_progress(self, store):
        item = store.add("Skydive", "adventure", progress=100)
        toggled = store.toggle_complete(item.id)
        assert toggled.completed is False
        assert toggled.progress == 100

    def test_reopening_keeps_partial_progress(self, store):
        item = store.add("Skydive", "adventure", progress=40, completed=True)
        assert store.toggle_complete(item.id).progress == 40

    def test_double_toggle_restores_completed(self, store):
        item = store.add("Skydive", "adventure", progress=35)
        store.toggle_complete(item.id)
        assert store.get(item.id).completed is True
        store.toggle_complete(item.id)
        assert store.get(item.id).completed is False
        assert store.get(item.id).progress == 100

    def test_toggle_missing_id(self, store, persistence):
        with pytest.raises(NotFoundError):
            store.toggle_complete("missing")
        assert persistence.write_count == 0

    def test_toggle_persists_and_refreshes_timestamp(self, store, persistence, clock):
        item = store.add("Skydive", "adventure")
        clock.advance(days=1)
        store.toggle_complete(item.id)
        entry = persisted(persistence)[0]
        assert entry["completed"] is True
        assert entry["progress"] == 100
        assert entry["updatedAt"] == clock.now.isoformat()


# ── statistics ────────────────────────────────────────────────────────


class TestStatistics:

    def test_empty_collection(self, store):
        stats = store.statistics()
        assert (stats.total, stats.completed, stats.overdue) == (0, 0, 0)
        assert stats.average_progress == 0
        assert stats.completion_rate == 0

    def test_counts_and_average(self, store):
        store.add("A", "travel", progress=100)
        store.add("B", "career", progress=50)
        store.add("C", "family", progress=0)

        stats = store.statistics()
        assert stats.total == 3
        assert stats.completed == 1
        assert stats.average_progress == 50
        assert stats.completion_rate == pytest.approx(100 / 3)
        assert stats.to_dict() == {"total": 3, "completed": 1, "overdue": 0, "averageProgress": 50}

    def test_overdue_then_toggle(self, store, yesterday):
        item = store.add("Visit Iceland", "travel", progress=60, deadline=yesterday, completed=False)
        assert store.statistics().overdue == 1

        store.toggle_complete(item.id)

        assert store.get(item.id).progress == 100
        assert store.statistics().overdue == 0

    def test_future_or_missing_deadline_not_overdue(self, store, tomorrow):
        store.add("Soon", "travel", deadline=tomorrow)
        store.add("Someday", "travel")
        assert store.statistics().overdue == 0

    def test_deadline_today_is_overdue_after_midnight(self, store, clock):
        store.add("Today", "travel", deadline=clock.now.date())
        assert store.statistics().overdue == 1

    def test_completed_false_at_100_counts_as_overdue(self, store, yesterday):
        item = store.add("Reopened", "travel", progress=100, deadline=yesterday)
        store.toggle_complete(item.id)
        assert store.statistics().overdue == 1

    def test_total_matches_collection(self, store):
        for i in range(5):
            store.add(f"Goal {i}", "personal")
        store.delete(store.items[0].id)
        stats = store.statistics()
        assert stats.total == len(store.items) == 4
        assert stats.completed <= stats.total


# ── filtering ─────────────────────────────────────────────────────────


class TestFilterByCategory:

    @pytest.fixture
    def populated(self, store):
        store.add("Paris", "travel")
        store.add("Promotion", "career")
        store.add("Tokyo", "travel")
        store.add("Half marathon", "fitness")
        return store

    def test_all_returns_full_collection_in_order(self, populated):
        assert populated.filter_by_category("all") == populated.items

    def test_category_keeps_order(self, populated):
        assert [i.title for i in populated.filter_by_category("travel")] == ["Paris", "Tokyo"]

    def test_accepts_enum(self, populated):
        assert [i.title for i in populated.filter_by_category(Category.CAREER)] == ["Promotion"]

    def test_empty_category(self, populated):
        assert populated.filter_by_category("creative") == []

    def test_unknown_category(self, populated):
        with pytest.raises(ValidationError):
            populated.filter_by_category("gardening")

    def test_category_counts(self, populated):
        counts = populated.category_counts()
        assert counts["all"] == 4
        assert counts["travel"] == 2
        assert counts["adventure"] == 0
        assert set(counts) == {"all"} | {c.value for c in Category}


# ── persistence sync ──────────────────────────────────────────────────


class TestLoad:

    def test_load_without_snapshot(self, store):
        assert store.load() == []
        assert store.error is None

    def test_round_trip_preserves_all_fields(self, store, persistence, clock, tomorrow):
        store.add("Visit Japan", "travel", description="Kyoto", deadline=tomorrow, progress=25)
        done = store.add("Learn to juggle", "creative", progress=100)
        clock.advance(hours=3)
        store.toggle_complete(done.id)

        reloaded = GoalStore(persistence, clock=clock)
        reloaded.load()

        assert reloaded.items == store.items

    def test_load_replaces_collection(self, store, persistence):
        store.add("Old", "travel")
        other = GoalStore(persistence)
        other.load()
        other.add("New", "career")

        store.load()
        assert [i.title for i in store.items] == ["Old", "New"]

    @pytest.mark.parametrize("blob", [
        "{not json",
        '{"id": "x"}',
        '[{"title": "no id"}]',
        '[{"id": "a", "title": "Bad", "category": "shopping", "progress": 0, '
        '"completed": false, "createdAt": "2026-01-01T00:00:00Z"}]',
        '[{"id": "a", "title": "T", "category": "travel", "createdAt": 12345}]',
        '[{"id": "a", "title": "T", "category": "travel", "createdAt": null}]',
        '[{"id": "a", "title": "T", "category": "travel", "createdAt": "2026-01-01T00:00:00Z", '
        '"updatedAt": {"at": "noon"}}]',
        "[" * 100000,
    ])
    def test_corrupted_snapshot_recovers(self, sink, clock, blob):
        persistence = MemoryPersistence(initial=blob)
        store = GoalStore(persistence, sink=sink, clock=clock)

        assert store.load() == []
        assert store.items == []
        assert store.error == "Failed to load items"
        assert any(message == "Failed to load items" for _, message, _ in sink.logs)

        item = store.add("Fresh start", "personal")
        assert [entry["id"] for entry in persisted(persistence)] == [item.id]

    def test_undecodable_snapshot_file_recovers(self, tmp_path):
        path = tmp_path / "goals.json"
        path.write_bytes(b"\xff\xfe[garbage")
        store = GoalStore(JsonFilePersistence(str(path)))

        assert store.load() == []
        assert store.error == "Failed to load items"

    def test_huge_progress_in_snapshot_is_clamped(self):
        blob = ('[{"id": "a", "title": "T", "category": "travel", "progress": 1' + "0" * 400 +
                ', "createdAt": "2026-01-01T00:00:00Z"}]')
        store = GoalStore(MemoryPersistence(initial=blob))

        assert [item.progress for item in store.load()] == [100]
        assert store.error is None

    def test_duplicate_ids_in_snapshot_rejected(self):
        entry = {"id": "same", "title": "Twin", "category": "family", "progress": 0,
                 "completed": False, "createdAt": "2026-01-01T00:00:00Z",
                 "updatedAt": "2026-01-01T00:00:00Z"}
        store = GoalStore(MemoryPersistence(initial=json.dumps([entry, entry])))
        assert store.load() == []
        assert store.error == "Failed to load items"

    def test_reads_browser_format(self):
        blob = json.dumps([{
            "id": "item_1700000000000_abc123def",
            "title": "See the Northern Lights",
            "description": "",
            "category": "travel",
            "deadline": "",
            "progress": 30,
            "completed": False,
            "createdAt": "2026-01-05T10:00:00.000Z",
            "updatedAt": "2026-01-06T10:00:00.000Z",
        }])
        store = GoalStore(MemoryPersistence(initial=blob))
        [item] = store.load()
        assert item.id == "item_1700000000000_abc123def"
        assert item.deadline is None
        assert item.updated_at > item.created_at

    def test_read_failure_recovers(self):
        class Unreadable(MemoryPersistence):
            def read(self):
                raise PersistenceError("storage unavailable")

        store = GoalStore(Unreadable())
        assert store.load() == []
        assert store.error == "Failed to load items"
        store.clear_error()
        assert store.error is None


class TestWriteFailures:

    def test_add_survives_write_failure(self, sink, clock):
        persistence = FailingWrites()
        store = GoalStore(persistence, sink=sink, clock=clock)
        first = store.add("Saved", "travel")
        persistence.fail = True

        second = store.add("Unsaved", "travel")

        assert store.items == [first, second]
        assert store.error == "Failed to save items"
        assert [entry["id"] for entry in persisted(persistence)] == [first.id]

    def test_delete_write_failure_keeps_last_good_snapshot(self):
        persistence = FailingWrites()
        store = GoalStore(persistence)
        item = store.add("Saved", "travel")
        persistence.fail = True

        assert store.delete(item.id) is True
        assert store.items == []
        assert [entry["id"] for entry in persisted(persistence)] == [item.id]


class TestInvariants:

    def test_ids_stay_unique_under_random_operations(self, store):
        rng = random.Random(1234)
        categories = [c.value for c in Category]

        for step in range(300):
            op = rng.choice(["add", "add", "update", "delete", "toggle"])
            ids = [item.id for item in store.items]
            if op == "add" or not ids:
                store.add(f"Goal {step}", rng.choice(categories), progress=rng.randrange(0, 101, 5))
            elif op == "update":
                store.update(rng.choice(ids), progress=rng.randrange(0, 101, 5))
            elif op == "delete":
                store.delete(rng.choice(ids))
            else:
                store.toggle_complete(rng.choice(ids))

            ids = [item.id for item in store.items]
            assert len(ids) == len(set(ids))
            for item in store.items:
                assert 0 <= item.progress <= 100
                assert item.progress % 5 == 0
                assert item.created_at <= item.updated_at

    def test_items_is_a_copy(self, store):
        store.add("Goal", "travel")
        store.items.clear()
        assert len(store) == 1
