from datetime import UTC, datetime, timedelta

import pytest

from casebank.core.constants import EntityKind, RestoreState
from casebank.integrations.files.database import DatabaseFileRelinker
from casebank.models.domain import StoredFile
from casebank.repositories.stored_file_repository import StoredFileRepository
from casebank.restore.id_mapping import IdMappingStore
from casebank.restore.file_relink import relink_files


@pytest.mark.asyncio
async def test_every_file_area_is_relinked_even_without_content(make_run, relinker):
    result = await make_run().execute([])

    assert result.state == RestoreState.COMPLETE
    assert relinker.calls == [
        (EntityKind.CASE, "statement", {}),
        (EntityKind.QUESTION, "questiontext", {}),
        (EntityKind.ANSWER, "answer", {}),
        (EntityKind.ANSWER, "feedback", {}),
    ]


@pytest.mark.asyncio
async def test_relinker_receives_run_mappings(store, make_run, relinker, backup):
    backup.category(10, "Torts").case(50, 10).question(100, 50).answer(1000, 100).answer(1001, 100)
    result = await make_run().execute(backup.elements)

    case = store.rows[EntityKind.CASE][0]
    question = store.rows[EntityKind.QUESTION][0]
    answers = store.rows[EntityKind.ANSWER]
    calls = {area: mapping for _, area, mapping in relinker.calls}
    assert calls["statement"] == {50: case["id"]}
    assert calls["questiontext"] == {100: question["id"]}
    assert calls["answer"] == calls["feedback"] == {1000: answers[0]["id"], 1001: answers[1]["id"]}
    assert result.files_relinked == {"statement": 1, "questiontext": 1, "answer": 2, "feedback": 2}


@pytest.mark.asyncio
async def test_dropped_questions_have_no_files_relinked(make_run, relinker, backup):
    backup.question(100, 999).answer(1000, 100)
    await make_run().execute(backup.elements)

    assert all(mapping == {} for _, _, mapping in relinker.calls)


def staged(token, area, item_id, name):
    return StoredFile(
        scope_id=None,
        file_area=area,
        item_id=item_id,
        file_name=name,
        mime_type="image/png",
        size_bytes=10,
        object_key=f"staging/{token}/{name}",
        restore_token=token,
    )


@pytest.mark.asyncio
async def test_database_relinker_moves_staged_files(db):
    repo = StoredFileRepository(db)
    await repo.add(staged("run-1", "statement", 50, "diagram.png"))
    await repo.add(staged("run-1", "statement", 51, "chart.png"))
    await repo.add(staged("run-2", "statement", 50, "other-run.png"))

    relinker = DatabaseFileRelinker(db, restore_token="run-1", scope_id=3)
    moved = await relinker.relink(EntityKind.CASE, "statement", {50: 7, 52: 9})
    await db.flush()

    assert moved == 1
    (linked,) = await repo.list_for_item(3, "statement", 7)
    assert linked.file_name == "diagram.png"
    assert linked.restore_token is None
    assert await repo.count_staged("run-1", "statement") == 1
    assert await repo.count_staged("run-2", "statement") == 1


@pytest.mark.asyncio
async def test_database_relinker_handles_overlapping_ids(db):
    repo = StoredFileRepository(db)
    await repo.add(staged("run-1", "questiontext", 5, "a.png"))
    await repo.add(staged("run-1", "questiontext", 7, "b.png"))

    maps = IdMappingStore()
    maps.publish(EntityKind.QUESTION, 5, 7)
    maps.publish(EntityKind.QUESTION, 7, 9)
    moved = await relink_files(DatabaseFileRelinker(db, "run-1", 1), maps)

    assert moved["questiontext"] == 2
    assert [f.file_name for f in await repo.list_for_item(1, "questiontext", 7)] == ["a.png"]
    assert [f.file_name for f in await repo.list_for_item(1, "questiontext", 9)] == ["b.png"]


@pytest.mark.asyncio
async def test_stale_staged_files_are_deleted(db):
    repo = StoredFileRepository(db)
    old = staged("run-old", "statement", 1, "old.png")
    old.created_at = datetime.now(UTC) - timedelta(days=3)
    await repo.add(old)
    await repo.add(staged("run-new", "statement", 1, "new.png"))

    deleted = await repo.delete_staged_before(datetime.now(UTC) - timedelta(hours=24))

    assert deleted == 1
    assert await repo.count_staged("run-new", "statement") == 1
    assert await repo.count_staged("run-old", "statement") == 0
