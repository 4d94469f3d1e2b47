from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from casebank.models.domain import StoredFile


class StoredFileRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, row: StoredFile) -> StoredFile:
        self.db.add(row)
        await self.db.flush()
        return row

    async def list_for_item(self, scope_id: int, file_area: str, item_id: int) -> list[StoredFile]:
        res = await self.db.execute(
            select(StoredFile)
            .where(
                StoredFile.scope_id == scope_id,
                StoredFile.file_area == file_area,
                StoredFile.item_id == item_id,
                StoredFile.restore_token.is_(None),
            )
            .order_by(StoredFile.id)
        )
        return list(res.scalars().all())

    async def attach_staged(
        self, restore_token: str, file_area: str, old_item_id: int, new_item_id: int, scope_id: int
    ) -> int:
        res = await self.db.execute(
            update(StoredFile)
            .where(
                StoredFile.restore_token == restore_token,
                StoredFile.file_area == file_area,
                StoredFile.item_id == old_item_id,
            )
            .values(item_id=new_item_id, scope_id=scope_id, restore_token=None)
            .execution_options(synchronize_session="fetch")
        )
        return int(res.rowcount or 0)

    async def count_staged(self, restore_token: str, file_area: str) -> int:
        res = await self.db.execute(
            select(func.count(StoredFile.id)).where(
                StoredFile.restore_token == restore_token,
                StoredFile.file_area == file_area,
            )
        )
        return int(res.scalar() or 0)

    async def count_all_staged(self) -> int:
        res = await self.db.execute(
            select(func.count(StoredFile.id)).where(StoredFile.restore_token.is_not(None))
        )
        return int(res.scalar() or 0)

    async def delete_staged_before(self, cutoff: datetime) -> int:
        res = await self.db.execute(
            delete(StoredFile)
            .where(StoredFile.restore_token.is_not(None), StoredFile.created_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        return int(res.rowcount or 0)
