import httpx
import pytest
from sqlalchemy import func, select

from casebank.api.deps import db_session
from casebank.main import create_app
from casebank.models.domain import Answer, Case, StoredFile, User


@pytest.fixture
async def client(db):
    db.add(User(id=99, username="admin", email="admin@example.com"))
    await db.flush()

    app = create_app()

    async def override_db_session():
        yield db

    app.dependency_overrides[db_session] = override_db_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def element(path, **attributes):
    return {"path": path, "attributes": attributes}


@pytest.mark.asyncio
async def test_post_restore_returns_counts_and_diagnostics(client, db):
    payload = {
        "scope_id": 1,
        "actor_user_id": 99,
        "elements": [
            element("/cases/case", id="50", categoryid="10", name="Negligence", createdby="7"),
            element("/cases/case/questions/question", id="100", caseid="50", questiontext="Duty?"),
            element("/cases/case/questions/question/answers/answer", id="1000", questionid="100", answer="Yes"),
            element("/cases/case/practice_attempts/attempt", id="500", caseid="50", userid="7"),
        ],
    }
    res = await client.post("/api/v1/restores", json=payload)

    assert res.status_code == 200
    body = res.json()
    assert body["state"] == "complete"
    assert body["inserted"]["category"] == 1
    assert body["inserted"]["case"] == 1
    assert body["inserted"]["answer"] == 1
    assert body["inserted"]["attempt"] == 0
    assert body["skippedElements"] == 1
    assert {d["reason"] for d in body["diagnostics"]} == {"category_fallback", "creator_fallback"}
    assert len(body["restoreToken"]) == 32
    case = (await db.execute(select(Case))).scalar_one()
    assert case.created_by == 99


@pytest.mark.asyncio
async def test_malformed_tree_is_rejected_and_rolled_back(client, db):
    payload = {
        "scope_id": 1,
        "actor_user_id": 99,
        "elements": [
            element("/cases/case", id="50", categoryid="10", name="Negligence"),
            element("/cases/case/questions/question", id="100", caseid="50"),
            element("/cases/case/questions/question/answers/answer", id="oops", questionid="100"),
        ],
    }
    res = await client.post("/api/v1/restores", json=payload)

    assert res.status_code == 422
    assert res.json()["detail"]["path"] == "/cases/case/questions/question/answers/answer"
    assert int((await db.execute(select(func.count(Case.id)))).scalar()) == 0
    assert int((await db.execute(select(func.count(Answer.id)))).scalar()) == 0


@pytest.mark.asyncio
async def test_health_live(client):
    res = await client.get("/api/v1/health/live")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_health_ready_reports_staged_backlog(client, db):
    db.add(
        StoredFile(
            file_area="statement",
            item_id=50,
            file_name="scene.png",
            mime_type="image/png",
            size_bytes=100,
            object_key="staging/run-x/scene.png",
            restore_token="run-x",
        )
    )
    await db.flush()

    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json() == {"status": "ready", "stagedFiles": 1}
