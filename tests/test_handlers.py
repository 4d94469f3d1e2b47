import pytest

from casebank.core.constants import EntityKind
from casebank.restore.handlers import AnswerHandler, AttemptHandler, QuestionHandler, ResponseHandler


@pytest.mark.asyncio
async def test_question_without_ancestor_uses_mapped_caseid(store, make_run):
    ctx = make_run().ctx
    ctx.id_maps.put(EntityKind.CASE, 50, 777)

    new_id = await QuestionHandler().handle(ctx, {"id": "100", "caseid": "50"}, {})

    (question,) = store.rows[EntityKind.QUESTION]
    assert question["id"] == new_id
    assert question["case_id"] == 777
    assert ctx.id_maps.get(EntityKind.QUESTION, 100) == new_id
    assert ctx.id_maps.get_published(EntityKind.QUESTION, 100) == new_id


@pytest.mark.asyncio
async def test_answer_without_ancestor_uses_mapped_questionid(store, make_run):
    ctx = make_run().ctx
    ctx.id_maps.put(EntityKind.QUESTION, 100, 888)

    new_id = await AnswerHandler().handle(ctx, {"id": "1000", "questionid": "100"}, {})

    (answer,) = store.rows[EntityKind.ANSWER]
    assert answer["question_id"] == 888
    assert ctx.id_maps.get_published(EntityKind.ANSWER, 1000) == new_id


@pytest.mark.asyncio
async def test_dropped_ancestor_falls_back_to_the_backup_key(store, make_run):
    ctx = make_run().ctx
    ctx.id_maps.put(EntityKind.QUESTION, 100, 888)

    await AnswerHandler().handle(ctx, {"id": "1000", "questionid": "100"}, {EntityKind.QUESTION: None})

    assert store.rows[EntityKind.ANSWER][0]["question_id"] == 888


@pytest.mark.asyncio
async def test_attempt_without_ancestor_uses_mapped_caseid(store, make_run):
    ctx = make_run(user_mapping={7: 42}, include_user_data=True).ctx
    ctx.id_maps.put(EntityKind.CASE, 50, 777)

    new_id = await AttemptHandler().handle(ctx, {"id": "500", "caseid": "50", "userid": "7"}, {})

    (attempt,) = store.rows[EntityKind.ATTEMPT]
    assert attempt["case_id"] == 777
    assert attempt["user_id"] == 42
    assert ctx.id_maps.get(EntityKind.ATTEMPT, 500) == new_id


@pytest.mark.asyncio
async def test_response_without_ancestor_uses_mapped_attemptid(store, make_run):
    ctx = make_run(include_user_data=True).ctx
    ctx.id_maps.put(EntityKind.ATTEMPT, 500, 999)
    ctx.id_maps.publish(EntityKind.QUESTION, 100, 888)

    await ResponseHandler().handle(ctx, {"attemptid": "500", "questionid": "100", "response": "1"}, {})

    (response,) = store.rows[EntityKind.RESPONSE]
    assert response["attempt_id"] == 999
    assert response["question_id"] == 888


@pytest.mark.asyncio
async def test_enclosing_ancestor_wins_over_the_backup_key(store, make_run):
    ctx = make_run().ctx
    ctx.id_maps.put(EntityKind.CASE, 50, 777)

    await QuestionHandler().handle(ctx, {"id": "100", "caseid": "50"}, {EntityKind.CASE: 321})

    assert store.rows[EntityKind.QUESTION][0]["case_id"] == 321
