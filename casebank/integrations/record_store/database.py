from collections.abc import Mapping
from typing import Any

from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from casebank.core.constants import EntityKind
from casebank.integrations.record_store.base import RecordStore
from casebank.models.domain import (
    Answer,
    Case,
    Category,
    PracticeAttempt,
    PracticeResponse,
    Question,
)

MODEL_BY_KIND = {
    EntityKind.CATEGORY: Category,
    EntityKind.CASE: Case,
    EntityKind.QUESTION: Question,
    EntityKind.ANSWER: Answer,
    EntityKind.ATTEMPT: PracticeAttempt,
    EntityKind.RESPONSE: PracticeResponse,
}


class DatabaseRecordStore(RecordStore):
    name = "database"

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, kind: EntityKind, record: Mapping[str, Any]) -> int:
        row = MODEL_BY_KIND[kind](**record)
        self.db.add(row)
        await self.db.flush()
        return int(row.id)

    async def find(self, kind: EntityKind, criteria: Mapping[str, Any]) -> dict[str, Any] | None:
        model = MODEL_BY_KIND[kind]
        res = await self.db.execute(
            select(model)
            .where(*(getattr(model, key) == value for key, value in criteria.items()))
            .order_by(model.id)
            .limit(1)
        )
        row = res.scalar_one_or_none()
        if row is None:
            return None
        return {attr.key: getattr(row, attr.key) for attr in inspect(model).column_attrs}
