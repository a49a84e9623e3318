from __future__ import annotations

import threading

from core.services.cache_store import CacheStore, normalize


def test_entities_are_keyed_by_typename_and_id():
    records = normalize("Root", {"profile": {"__typename": "UserProfile", "id": "1", "displayName": "Ann"}})

    assert records["Root"] == {"profile": {"__ref": "UserProfile:1"}}
    assert records["UserProfile:1"] == {"__typename": "UserProfile", "id": "1", "displayName": "Ann"}


def test_objects_without_identity_are_keyed_by_path():
    records = normalize("Root", {"stats": {"count": 2}, "items": [{"__typename": "A", "id": 1}, {"x": 1}]})

    assert records["Root"]["stats"] == {"__ref": "Root.stats"}
    assert records["Root"]["items"] == [{"__ref": "A:1"}, {"__ref": "Root.items.1"}]
    assert records["Root.items.1"] == {"x": 1}


def test_merge_overwrites_only_given_fields():
    store = CacheStore()
    store.merge({"User:1": {"a": 1, "b": 2}})

    changed = store.merge({"User:1": {"b": 3}})

    assert changed == {"User:1"}
    assert store.record("User:1") == {"a": 1, "b": 3}


def test_merge_is_idempotent():
    store = CacheStore()
    records = normalize("Root", {"me": {"__typename": "User", "id": "1", "name": "Ann"}})

    store.merge(records)
    before = store.snapshot()
    changed = store.merge(records)

    assert changed == set()
    assert store.snapshot() == before


def test_same_entity_from_two_operations_is_stored_once():
    store = CacheStore()
    store.merge(normalize("OpA", {"me": {"__typename": "User", "id": "1", "name": "Ann"}}))
    store.merge(normalize("OpB", {"friend": {"__typename": "User", "id": "1", "age": 30}}))

    assert store.keys() == ["OpA", "OpB", "User:1"]
    assert store.record("User:1") == {"__typename": "User", "id": "1", "name": "Ann", "age": 30}


def test_load_rebuilds_the_tree():
    store = CacheStore()
    data = {"me": {"__typename": "User", "id": "1", "tags": [{"label": "x"}]}, "count": 3}
    store.merge(normalize("Root", data))

    assert store.load("Root") == data


def test_load_unknown_root_is_none():
    assert CacheStore().load("Missing") is None


def test_load_with_dangling_reference_is_none():
    store = CacheStore()
    store.merge({"Root": {"me": {"__ref": "User:404"}}})

    assert store.load("Root") is None


def test_load_stops_at_reference_cycles():
    store = CacheStore()
    store.merge(
        {
            "Root": {"me": {"__ref": "User:1"}},
            "User:1": {"id": "1", "friend": {"__ref": "User:1"}},
        }
    )

    assert store.load("Root") == {"me": {"id": "1", "friend": {"id": "1"}}}


def test_records_returned_are_copies():
    store = CacheStore()
    store.merge({"User:1": {"tags": ["a"]}})

    store.record("User:1")["tags"].append("b")

    assert store.record("User:1") == {"tags": ["a"]}


def test_concurrent_merges_keep_one_record_per_entity():
    store = CacheStore()

    def writer(n: int) -> None:
        for i in range(50):
            store.merge({"User:1": {"id": "1", f"field{n}": i}})

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert store.keys() == ["User:1"]
    assert store.record("User:1") == {"id": "1", "field0": 49, "field1": 49, "field2": 49, "field3": 49}
