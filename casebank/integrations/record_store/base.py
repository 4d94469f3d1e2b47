from collections.abc import Mapping
from typing import Any

from casebank.core.constants import EntityKind


class RecordStore:
    """Destination storage for restored rows. Primary keys are allocated by the store."""

    name: str = "base"

    async def insert(self, kind: EntityKind, record: Mapping[str, Any]) -> int:
        raise NotImplementedError

    async def find(self, kind: EntityKind, criteria: Mapping[str, Any]) -> dict[str, Any] | None:
        raise NotImplementedError
