import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from casebank.core.constants import (
    ANSWERS_PATH,
    ATTEMPTS_PATH,
    CASES_PATH,
    CATEGORIES_PATH,
    QUESTIONS_PATH,
    RESPONSES_PATH,
)
from casebank.db.base import Base
from casebank.integrations.files.base import FileRelinker
from casebank.integrations.identity.mapped import MappedUserResolver
from casebank.integrations.record_store.memory import MemoryRecordStore
from casebank.models import domain  # noqa: F401  registers tables on Base.metadata
from casebank.restore.context import RunContext
from casebank.restore.run import RestoreRun


class RecordingRelinker(FileRelinker):
    name = "recording"

    def __init__(self) -> None:
        self.calls = []

    async def relink(self, entity_kind, file_area, mapping):
        self.calls.append((entity_kind, file_area, dict(mapping)))
        return len(mapping)


class BackupBuilder:
    """Builds a pre-order element stream; values are strings as an exporter writes them."""

    def __init__(self) -> None:
        self.elements = []

    def _add(self, path, **attrs):
        self.elements.append((path, {k: str(v) for k, v in attrs.items()}))
        return self

    def category(self, id, name, parent=0, **extra):
        return self._add(CATEGORIES_PATH, id=id, name=name, parent=parent, **extra)

    def case(self, id, categoryid, name="Case", createdby=0, **extra):
        return self._add(CASES_PATH, id=id, categoryid=categoryid, name=name, createdby=createdby, **extra)

    def question(self, id, caseid, questiontext="Question?", qtype="multichoice", **extra):
        return self._add(QUESTIONS_PATH, id=id, caseid=caseid, questiontext=questiontext, qtype=qtype, **extra)

    def answer(self, id, questionid, answer="Answer", fraction="0.0000000", **extra):
        return self._add(ANSWERS_PATH, id=id, questionid=questionid, answer=answer, fraction=fraction, **extra)

    def attempt(self, id, caseid, userid, **extra):
        return self._add(ATTEMPTS_PATH, id=id, caseid=caseid, userid=userid, **extra)

    def response(self, attemptid, questionid, response="1", **extra):
        return self._add(RESPONSES_PATH, attemptid=attemptid, questionid=questionid, response=response, **extra)


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def relinker():
    return RecordingRelinker()


@pytest.fixture
def backup():
    return BackupBuilder()


@pytest.fixture
def make_run(store, relinker):
    def _make(user_mapping=None, actor_user_id=99, scope_id=1, include_user_data=False):
        ctx = RunContext(
            record_store=store,
            user_resolver=MappedUserResolver(user_mapping or {}),
            actor_user_id=actor_user_id,
            destination_scope=scope_id,
            include_user_data=include_user_data,
        )
        return RestoreRun(ctx, relinker)

    return _make


@pytest.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
    await engine.dispose()
