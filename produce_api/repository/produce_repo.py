from __future__ import annotations

# produce_api/repository/produce_repo.py
from typing import Any, Mapping, Optional

from ..db import StorageHandle
from ..models import Produce, ProduceType

COLUMNS = "id, name, type, price_per_kg"

# SQLite INTEGER is signed 64-bit; larger ids cannot be bound and cannot exist
ID_MIN = -(2 ** 63)
ID_MAX = 2 ** 63 - 1

# Updatable fields: attribute name -> column. SET clauses are only ever built
# from this table, never from keys supplied by the caller.
UPDATABLE = (
    ("name", "name"),
    ("type", "type"),
    ("price_per_kg", "price_per_kg"),
)


def storable_id(produce_id: int) -> bool:
    return ID_MIN <= int(produce_id) <= ID_MAX


def _to_db(value: Any) -> Any:
    return value.value if isinstance(value, ProduceType) else value


def row_to_produce(row: Mapping[str, Any]) -> Produce:
    return Produce(
        id=int(row["id"]),
        name=str(row["name"]),
        type=ProduceType(row["type"]),
        price_per_kg=float(row["price_per_kg"]),
    )


def build_set_clause(changes: Mapping[str, Any]) -> tuple[str, dict[str, Any]]:
    """
    Fold the partial patch over UPDATABLE.

    Returns ("name = :name, price_per_kg = :price_per_kg", {...}) for the
    fields present in ``changes``; ("", {}) when none are.
    """
    parts: list[str] = []
    params: dict[str, Any] = {}
    for attr, column in UPDATABLE:
        if attr not in changes or changes[attr] is None:
            continue
        parts.append(f"{column} = :{column}")
        params[column] = _to_db(changes[attr])
    return ", ".join(parts), params


class ProduceRepository:
    """Produce CRUD. One SQL statement per call; no caching."""

    def __init__(self, handle: StorageHandle):
        self.handle = handle

    def create(self, name: str, type: ProduceType | str, price_per_kg: float) -> Produce:
        ptype = ProduceType(type)
        res = self.handle.execute(
            "INSERT INTO produce(name, type, price_per_kg) VALUES(:name, :type, :price_per_kg)",
            {"name": name, "type": ptype.value, "price_per_kg": float(price_per_kg)},
        )
        return Produce(id=int(res.lastrowid), name=name, type=ptype, price_per_kg=float(price_per_kg))

    def get_by_id(self, produce_id: int) -> Optional[Produce]:
        if not storable_id(produce_id):
            return None
        row = self.handle.fetch_one(
            f"SELECT {COLUMNS} FROM produce WHERE id = :id LIMIT 1",
            {"id": int(produce_id)},
        )
        return row_to_produce(row) if row else None

    def list(self) -> list[Produce]:
        rows = self.handle.fetch_all(f"SELECT {COLUMNS} FROM produce ORDER BY id ASC")
        return [row_to_produce(r) for r in rows]

    def update(self, produce_id: int, changes: Mapping[str, Any]) -> Optional[Produce]:
        if not storable_id(produce_id):
            return None
        set_clause, params = build_set_clause(changes)
        if not set_clause:
            return self.get_by_id(produce_id)
        params["id"] = int(produce_id)
        self.handle.execute(f"UPDATE produce SET {set_clause} WHERE id = :id", params)
        # rowcount cannot tell "missing" from "unchanged" on every driver; read back instead
        return self.get_by_id(produce_id)

    def delete(self, produce_id: int) -> bool:
        if not storable_id(produce_id):
            return False
        res = self.handle.execute("DELETE FROM produce WHERE id = :id", {"id": int(produce_id)})
        return (res.rowcount or 0) > 0

    def clear_all(self) -> None:
        """Test-only: wipe the table and restart ids at 1."""
        self.handle.execute("DELETE FROM produce")
        self.handle.execute("DELETE FROM sqlite_sequence WHERE name = 'produce'")
