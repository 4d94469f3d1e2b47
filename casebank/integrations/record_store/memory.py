from collections.abc import Mapping
from typing import Any

from casebank.core.constants import EntityKind
from casebank.integrations.record_store.base import RecordStore


class MemoryRecordStore(RecordStore):
    """Keeps rows in process memory. Ids come from one sequence shared by every kind."""

    name = "memory"

    def __init__(self, first_id: int = 1) -> None:
        self.rows: dict[EntityKind, list[dict[str, Any]]] = {kind: [] for kind in EntityKind}
        self._next_id = first_id

    async def insert(self, kind: EntityKind, record: Mapping[str, Any]) -> int:
        new_id = self._next_id
        self._next_id += 1
        self.rows[kind].append({**record, "id": new_id})
        return new_id

    async def find(self, kind: EntityKind, criteria: Mapping[str, Any]) -> dict[str, Any] | None:
        for row in self.rows[kind]:
            if all(row.get(key) == value for key, value in criteria.items()):
                return dict(row)
        return None

    def count(self, kind: EntityKind) -> int:
        return len(self.rows[kind])
