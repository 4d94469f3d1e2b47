from sqlalchemy.ext.asyncio import AsyncSession

from casebank.db.session import get_db


async def db_session() -> AsyncSession:
    async for s in get_db():
        yield s
