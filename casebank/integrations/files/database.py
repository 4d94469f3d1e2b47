from collections.abc import Mapping

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from casebank.core.constants import EntityKind
from casebank.integrations.files.base import FileRelinker
from casebank.repositories.stored_file_repository import StoredFileRepository

logger = structlog.get_logger()


class DatabaseFileRelinker(FileRelinker):
    """Attaches files staged under a restore token to the rows created by that restore."""

    name = "database"

    def __init__(self, db: AsyncSession, restore_token: str, scope_id: int) -> None:
        self.repo = StoredFileRepository(db)
        self.restore_token = restore_token
        self.scope_id = scope_id

    async def relink(self, entity_kind: EntityKind, file_area: str, mapping: Mapping[int, int]) -> int:
        moved = 0
        for old_id, new_id in mapping.items():
            moved += await self.repo.attach_staged(
                restore_token=self.restore_token,
                file_area=file_area,
                old_item_id=old_id,
                new_item_id=new_id,
                scope_id=self.scope_id,
            )
        leftover = await self.repo.count_staged(self.restore_token, file_area)
        if leftover:
            logger.warning(
                "staged_files_unmatched",
                kind=entity_kind.value,
                file_area=file_area,
                count=leftover,
            )
        return moved
