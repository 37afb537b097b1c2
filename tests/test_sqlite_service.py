# tests/test_sqlite_service.py
import math
import pytest

from backend.lib.sqlite_service import ConsumptionStore, StoreError

def test_append_assigns_increasing_ids(store):
    ids = [store.append(f"2025-11-0{d}", float(d)) for d in range(1, 5)]
    assert ids == sorted(ids)
    assert len(set(ids)) == 4

def test_list_all_is_ascending_by_date(store):
    for day, value in [("2025-11-03", 3.0), ("2025-11-01", 1.0), ("2025-11-02", 2.0)]:
        store.append(day, value)
    records = store.list_all()
    assert [r.date for r in records] == ["2025-11-01", "2025-11-02", "2025-11-03"]

def test_round_trip_keeps_values(store):
    new_id = store.append("2025-11-01", 12.345678901234)
    [record] = store.list_all()
    assert record.id == new_id
    assert record.date == "2025-11-01"
    assert record.consumption == 12.345678901234

def test_list_recent_is_most_recent_first(store):
    for day in ["2025-11-02", "2025-11-04", "2025-11-01", "2025-11-03"]:
        store.append(day, 1.0)
    recent = store.list_recent(3)
    assert [r.date for r in recent] == ["2025-11-04", "2025-11-03", "2025-11-02"]
    assert len(store.list_recent(10)) == 4

def test_same_date_ties_follow_insert_order(store):
    first = store.append("2025-11-01", 1.0)
    second = store.append("2025-11-01", 2.0)
    assert [r.id for r in store.list_all()] == [first, second]
    assert [r.id for r in store.list_recent(2)] == [second, first]

@pytest.mark.parametrize("day,value", [
    ("", 1.0),
    (None, 1.0),
    (20251101, 1.0),
    ("2025-11-01", "12"),
    ("2025-11-01", True),
    ("2025-11-01", math.inf),
    ("2025-11-01", math.nan),
    ("2025-11-01", 10 ** 400),
    ("2025-11-01", -1.0),
    ("2025-11-01", -0.5),
    ("2025-11-01", 1e301),
])
def test_invalid_input_rejected(store, day, value):
    with pytest.raises(ValueError):
        store.append(day, value)
    assert store.list_all() == []

def test_store_persists_across_reopen(tmp_path):
    path = tmp_path / "nested" / "consumption.db"
    first = ConsumptionStore(str(path))
    first.append("2025-11-01", 5.5)
    first.close()

    second = ConsumptionStore(str(path))
    try:
        [record] = second.list_all()
        assert (record.date, record.consumption) == ("2025-11-01", 5.5)
        # ids are never reused
        assert second.append("2025-11-02", 1.0) == record.id + 1
    finally:
        second.close()

def test_engine_errors_become_store_errors(store):
    store.close()
    with pytest.raises(StoreError) as exc:
        store.list_all()
    assert "closed" in str(exc.value)

def test_large_finite_reading_is_stored(store):
    store.append("2025-11-01", 1e24)
    store.append("2025-11-02", 10 ** 20)
    assert [r.consumption for r in store.list_all()] == [1e24, 1e20]
