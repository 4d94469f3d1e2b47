from collections.abc import AsyncGenerator
from uuid import uuid4

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from casebank.core.config import get_settings

settings = get_settings()
db_url = make_url(settings.async_database_url)
query = dict(db_url.query)
engine_kwargs = {"pool_pre_ping": True, "future": True}

# pgbouncer in transaction mode cannot keep prepared statements between checkouts.
if db_url.port == 6543:
    engine_kwargs["poolclass"] = NullPool
    engine_kwargs["connect_args"] = {
        "statement_cache_size": 0,
        "prepared_statement_name_func": lambda: f"__asyncpg_{uuid4().hex}__",
    }
    query["prepared_statement_cache_size"] = "0"
    db_url = db_url.set(query=query)
elif db_url.get_backend_name() == "postgresql":
    engine_kwargs["connect_args"] = {"statement_cache_size": 0}

engine = create_async_engine(db_url.render_as_string(hide_password=False), **engine_kwargs)

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
