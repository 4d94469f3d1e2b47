from sqlalchemy.ext.asyncio import AsyncSession

from casebank.integrations.identity.base import UserResolver
from casebank.repositories.user_repository import UserRepository


class SameSiteUserResolver(UserResolver):
    """Backups taken on this site keep their user ids; the user must still be active."""

    name = "same_site"

    def __init__(self, db: AsyncSession) -> None:
        self.repo = UserRepository(db)
        self._cache: dict[int, int | None] = {}

    async def resolve_user(self, old_user_id: int) -> int | None:
        if old_user_id <= 0:
            return None
        if old_user_id not in self._cache:
            user = await self.repo.get_by_id(old_user_id)
            self._cache[old_user_id] = user.id if user and user.is_active else None
        return self._cache[old_user_id]
