from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from casebank.models.domain import User


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> User | None:
        res = await self.db.execute(select(User).where(User.id == user_id))
        return res.scalar_one_or_none()
