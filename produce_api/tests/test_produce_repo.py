"""
Repository tests. The ``repo`` fixture runs every test against both drivers.
"""
import pytest

from produce_api.models import Produce, ProduceType
from produce_api.repository.produce_repo import build_set_clause

SAMPLES = [
    ("Apple", "fruit", 2.5),
    ("Carrot", "vegetable", 0.0),
    ("Ñame", ProduceType.VEGETABLE, 1234.75),
    ("Dragon fruit", ProduceType.FRUIT, 12),
    ("x" * 200, "fruit", 0.01),
]


@pytest.mark.parametrize("name,ptype,price", SAMPLES)
def test_create_then_get_roundtrip(repo, name, ptype, price):
    created = repo.create(name, ptype, price)
    assert created.id >= 1

    got = repo.get_by_id(created.id)
    assert got == created
    assert got.name == name
    assert got.type == ProduceType(ptype)
    assert got.price_per_kg == pytest.approx(float(price))


def test_ids_are_fresh(repo):
    ids = [repo.create(f"item-{i}", "fruit", i).id for i in range(5)]
    assert len(set(ids)) == 5
    assert ids == sorted(ids)


def test_get_missing_is_none(repo):
    assert repo.get_by_id(1) is None
    assert repo.get_by_id(-3) is None


def test_list_is_ordered_by_id(repo):
    assert repo.list() == []
    a = repo.create("Apple", "fruit", 2.5)
    b = repo.create("Beet", "vegetable", 1.0)
    c = repo.create("Cherry", "fruit", 9.0)
    items = repo.list()
    assert [p.id for p in items] == [a.id, b.id, c.id]
    assert all(isinstance(p, Produce) for p in items)


def test_list_contains_each_record_once_until_deleted(repo):
    keep = repo.create("Leek", "vegetable", 3.0)
    gone = repo.create("Lime", "fruit", 4.0)
    assert [p.id for p in repo.list()].count(gone.id) == 1

    assert repo.delete(gone.id) is True
    ids = [p.id for p in repo.list()]
    assert gone.id not in ids
    assert keep.id in ids


def test_update_empty_patch_is_noop(repo):
    created = repo.create("Pear", "fruit", 2.0)
    before = repo.get_by_id(created.id)
    assert repo.update(created.id, {}) == before
    assert repo.get_by_id(created.id) == before


def test_update_empty_patch_on_missing_id(repo):
    assert repo.update(42, {}) is None


@pytest.mark.parametrize(
    "changes,expected",
    [
        ({"price_per_kg": 3.0}, ("Apple", ProduceType.FRUIT, 3.0)),
        ({"name": "Green apple"}, ("Green apple", ProduceType.FRUIT, 2.5)),
        ({"type": ProduceType.VEGETABLE}, ("Apple", ProduceType.VEGETABLE, 2.5)),
        ({"name": "Kale", "type": "vegetable", "price_per_kg": 0}, ("Kale", ProduceType.VEGETABLE, 0.0)),
    ],
)
def test_update_changes_only_supplied_fields(repo, changes, expected):
    created = repo.create("Apple", "fruit", 2.5)
    updated = repo.update(created.id, changes)
    assert updated is not None
    assert updated.id == created.id
    assert (updated.name, updated.type, updated.price_per_kg) == expected
    assert repo.get_by_id(created.id) == updated


def test_update_missing_id_is_none(repo):
    repo.create("Apple", "fruit", 2.5)
    assert repo.update(999, {"name": "Ghost"}) is None
    assert [p.name for p in repo.list()] == ["Apple"]


def test_update_with_same_values_still_returns_record(repo):
    created = repo.create("Apple", "fruit", 2.5)
    assert repo.update(created.id, {"price_per_kg": 2.5}) == created


def test_update_ignores_unknown_keys(repo):
    created = repo.create("Apple", "fruit", 2.5)
    # Only the fixed field table ever reaches SQL
    assert repo.update(created.id, {"id": 77, "name; DROP TABLE produce": "x"}) == created
    assert repo.get_by_id(77) is None


def test_delete(repo):
    created = repo.create("Onion", "vegetable", 1.2)
    assert repo.delete(created.id) is True
    assert repo.get_by_id(created.id) is None
    assert repo.delete(created.id) is False
    assert repo.delete(12345) is False


def test_clear_all_resets_ids(repo):
    for i in range(3):
        repo.create(f"item-{i}", "fruit", 1.0)
    repo.clear_all()
    assert repo.list() == []
    assert repo.create("Apple", "fruit", 2.5).id == 1


def test_clear_all_on_empty_table(repo):
    repo.clear_all()
    assert repo.list() == []


def test_build_set_clause():
    assert build_set_clause({}) == ("", {})
    assert build_set_clause({"name": None}) == ("", {})

    sql, params = build_set_clause({"price_per_kg": 3.0, "type": ProduceType.FRUIT})
    # Column order follows the field table, not the patch
    assert sql == "type = :type, price_per_kg = :price_per_kg"
    assert params == {"type": "fruit", "price_per_kg": 3.0}


@pytest.mark.parametrize("produce_id", [2 ** 63, -(2 ** 63) - 1, 10 ** 20])
def test_ids_outside_integer_range_are_absent(repo, produce_id):
    created = repo.create("Apple", "fruit", 2.5)
    assert repo.get_by_id(produce_id) is None
    assert repo.update(produce_id, {"name": "Big"}) is None
    assert repo.update(produce_id, {}) is None
    assert repo.delete(produce_id) is False
    assert repo.list() == [created]
