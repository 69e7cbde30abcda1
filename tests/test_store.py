"""Tests for the JSON file store."""

import json
import logging
import threading

from shortlinks.database.json_store import JsonFileStore
from shortlinks.errors import PersistenceFailure
from shortlinks.database.models import Owner, ShortLink


def make_link(code="abc123", owner_id="owner-1", **kwargs) -> ShortLink:
    fields = dict(
        code=code,
        original_url=f"https://example.com/{code}",
        owner_id=owner_id,
        created_at=1_700_000_000.0,
    )
    fields.update(kwargs)
    return ShortLink(**fields)


class TestStoreOperations:
    """In-memory behaviour of the store."""

    def test_put_creates_owner(self, store):
        store.put(make_link())

        assert store.get("abc123").original_url == "https://example.com/abc123"
        assert store.get_user("owner-1").codes == ["abc123"]

    def test_put_is_idempotent(self, store):
        store.put(make_link())
        store.put(make_link(click_count=2))

        assert len(store) == 1
        assert store.get("abc123").click_count == 2
        assert store.get_user("owner-1").codes == ["abc123"]

    def test_get_missing(self, store):
        assert store.get("nope") is None
        assert "nope" not in store

    def test_get_returns_copy(self, store):
        store.put(make_link())

        link = store.get("abc123")
        link.increase_click()

        assert store.get("abc123").click_count == 0

    def test_remove(self, store):
        store.put(make_link("a1"))
        store.put(make_link("a2"))

        assert store.remove("a1") is True
        assert store.get("a1") is None
        assert store.get_user("owner-1").codes == ["a2"]

    def test_remove_missing_is_noop(self, store):
        store.put(make_link())
        assert store.remove("missing") is False
        assert store.remove("missing") is False
        assert len(store) == 1

    def test_owner_kept_after_last_code_removed(self, store):
        store.put(make_link())
        store.remove("abc123")

        owner = store.get_user("owner-1")
        assert owner is not None
        assert owner.codes == []

    def test_all_links_is_snapshot(self, store):
        store.put(make_link("a1"))
        snapshot = store.all_links()
        store.put(make_link("a2"))
        store.remove("a1")

        assert [link.code for link in snapshot] == ["a1"]

    def test_increment_clicks(self, store):
        store.put(make_link())

        updated = store.increment_clicks("abc123")

        assert updated.click_count == 1
        assert store.get("abc123").click_count == 1
        assert store.increment_clicks("missing") is None

    def test_put_user_and_prefix_lookup(self, store):
        store.put_user(Owner(id="0f8c2b9e-aaaa"))

        assert store.get_user("0f8c2b9e-aaaa").codes == []
        assert store.find_user_by_prefix("0f8c") == "0f8c2b9e-aaaa"
        assert store.find_user_by_prefix("zzz") is None
        assert store.find_user_by_prefix("") is None

    def test_put_user_cannot_desync_codes(self, store):
        store.put(make_link("a1"))
        store.put_user(Owner(id="owner-1", codes=["ghost"]))

        assert store.get_user("owner-1").codes == ["a1"]

    def test_links_for_owner(self, store):
        store.put(make_link("a1", owner_id="alice"))
        store.put(make_link("b1", owner_id="bob"))
        store.put(make_link("a2", owner_id="alice"))

        assert [link.code for link in store.links_for_owner("alice")] == ["a1", "a2"]
        assert store.links_for_owner("nobody") == []


class TestPersistence:
    """File mirroring and loading."""

    def test_file_layout(self, store, data_file):
        store.put(make_link(ttl=60, max_clicks=5, click_count=1))

        data = json.loads(data_file.read_text(encoding="utf-8"))

        assert data["links"] == [{
            "code": "abc123",
            "originalUrl": "https://example.com/abc123",
            "ownerId": "owner-1",
            "createdAt": 1_700_000_000.0,
            "ttl": 60,
            "maxClicks": 5,
            "clickCount": 1,
        }]
        assert data["users"] == [{"id": "owner-1", "codes": ["abc123"]}]

    def test_round_trip(self, store, data_file, logger):
        store.put(make_link("a1", owner_id="alice", max_clicks=3, click_count=2))
        store.put(make_link("b1", owner_id="bob", ttl=120))
        store.put_user(Owner(id="carol"))
        store.remove("missing")

        reloaded = JsonFileStore(data_file, logger=logger)

        assert {link.code: link for link in reloaded.all_links()} == {
            link.code: link for link in store.all_links()
        }
        assert reloaded.get_user("alice").codes == ["a1"]
        assert reloaded.get_user("bob").codes == ["b1"]
        assert reloaded.get_user("carol").codes == []

    def test_missing_file_gives_empty_store(self, data_file, logger):
        store = JsonFileStore(data_file, logger=logger)
        assert len(store) == 0
        assert not data_file.exists()

    def test_empty_file_gives_empty_store(self, data_file, logger):
        data_file.write_text("", encoding="utf-8")
        assert len(JsonFileStore(data_file, logger=logger)) == 0

        data_file.write_text("  \n", encoding="utf-8")
        assert len(JsonFileStore(data_file, logger=logger)) == 0

    def test_malformed_json_gives_empty_store(self, data_file, logger, caplog):
        data_file.write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.ERROR, logger="shortlinks"):
            store = JsonFileStore(data_file, logger=logger)

        assert len(store) == 0
        assert "malformed" in caplog.text

    def test_invalid_schema_gives_empty_store(self, data_file, logger):
        data_file.write_text(json.dumps({
            "links": [{"code": "x", "originalUrl": "https://e.com", "ownerId": "o",
                       "createdAt": 1.0, "clickCount": -1}],
        }), encoding="utf-8")

        assert len(JsonFileStore(data_file, logger=logger)) == 0

    def test_unknown_fields_are_ignored(self, data_file, logger):
        data_file.write_text(json.dumps({
            "version": 2,
            "links": [{"code": "x", "originalUrl": "https://e.com", "ownerId": "o",
                       "createdAt": 1.0, "ttl": 0, "maxClicks": 0, "clickCount": 3,
                       "tags": ["a"]}],
            "users": [{"id": "o", "codes": ["x"], "displayName": "Olga"}],
        }), encoding="utf-8")

        store = JsonFileStore(data_file, logger=logger)

        assert store.get("x").click_count == 3
        assert store.get_user("o").codes == ["x"]

    def test_owner_records_rebuilt_from_links(self, data_file, logger):
        data_file.write_text(json.dumps({
            "links": [{"code": "x", "originalUrl": "https://e.com", "ownerId": "o",
                       "createdAt": 1.0}],
            "users": [{"id": "other", "codes": ["x", "gone"]}],
        }), encoding="utf-8")

        store = JsonFileStore(data_file, logger=logger)

        assert store.get_user("o").codes == ["x"]
        assert store.get_user("other").codes == []

    def test_no_temp_files_left_behind(self, store, data_file):
        for i in range(5):
            store.put(make_link(f"c{i}"))

        assert [p.name for p in data_file.parent.iterdir()] == ["data.json"]

    def test_creates_parent_directory(self, tmp_path, logger):
        path = tmp_path / "nested" / "dir" / "links.json"
        store = JsonFileStore(path, logger=logger)
        store.put(make_link())

        assert path.exists()

    def test_write_failure_keeps_memory_state(self, tmp_path, logger, caplog):
        path = tmp_path / "data.json"
        path.mkdir()

        with caplog.at_level(logging.ERROR, logger="shortlinks"):
            store = JsonFileStore(path, logger=logger)
            store.put(make_link())

        assert store.get("abc123") is not None
        assert "Cannot write" in caplog.text
        assert isinstance(store.last_error, PersistenceFailure)

    def test_write_error_cleared_by_next_successful_write(self, tmp_path, logger):
        blocker = tmp_path / "sub"
        blocker.write_text("not a directory", encoding="utf-8")
        store = JsonFileStore(blocker / "data.json", logger=logger)

        store.put(make_link("a1"))
        assert isinstance(store.last_error, PersistenceFailure)

        blocker.unlink()
        store.put(make_link("a2"))

        assert store.last_error is None
        reloaded = JsonFileStore(blocker / "data.json", logger=logger)
        assert sorted(link.code for link in reloaded.all_links()) == ["a1", "a2"]

    def test_unreadable_file_gives_empty_store(self, tmp_path, logger):
        path = tmp_path / "data.json"
        path.mkdir()

        store = JsonFileStore(path, logger=logger)

        assert len(store) == 0
        assert "Cannot read" in str(store.last_error)

    def test_deeply_nested_json_gives_empty_store(self, data_file, logger, caplog):
        data_file.write_text("[" * 200000, encoding="utf-8")

        with caplog.at_level(logging.ERROR, logger="shortlinks"):
            store = JsonFileStore(data_file, logger=logger)

        assert len(store) == 0
        assert "malformed" in caplog.text

    def test_oversized_number_does_not_abort_load(self, data_file, logger):
        data_file.write_text(
            '{"links": [], "users": [], "n": ' + "1" * 5000 + "}", encoding="utf-8"
        )

        store = JsonFileStore(data_file, logger=logger)

        assert len(store) == 0


class TestStoreConcurrency:
    """Thread safety of the store."""

    def test_concurrent_increments_are_not_lost(self, store):
        store.put(make_link())

        def worker():
            for _ in range(25):
                store.increment_clicks("abc123")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get("abc123").click_count == 200

    def test_owner_index_consistent_after_concurrent_writes(self, store):
        def worker(prefix):
            for i in range(20):
                store.put(make_link(f"{prefix}{i}", owner_id=prefix))
                if i % 2:
                    store.remove(f"{prefix}{i - 1}")

        threads = [threading.Thread(target=worker, args=(p,)) for p in ("a", "b", "c")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for prefix in ("a", "b", "c"):
            owned = sorted(store.get_user(prefix).codes)
            stored = sorted(link.code for link in store.all_links() if link.owner_id == prefix)
            assert owned == stored
            assert len(owned) == 10

    def test_file_matches_memory_after_concurrent_writes(self, store, data_file, logger):
        """The data file is one consistent snapshot once the writers finish."""
        def worker(prefix):
            for i in range(20):
                store.put(make_link(f"{prefix}{i}", owner_id=prefix))
                if i % 3 == 0:
                    store.remove(f"{prefix}{i}")
                else:
                    store.increment_clicks(f"{prefix}{i}")

        threads = [threading.Thread(target=worker, args=(p,)) for p in ("a", "b", "c", "d")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        reloaded = JsonFileStore(data_file, logger=logger)

        assert {link.code: link for link in reloaded.all_links()} == {
            link.code: link for link in store.all_links()
        }
        for prefix in ("a", "b", "c", "d"):
            owned = reloaded.get_user(prefix).codes
            stored = [link.code for link in reloaded.all_links() if link.owner_id == prefix]
            assert sorted(owned) == sorted(stored)
            assert owned == store.get_user(prefix).codes

        on_disk = json.loads(data_file.read_text(encoding="utf-8"))
        assert len(on_disk["links"]) == len(store)
