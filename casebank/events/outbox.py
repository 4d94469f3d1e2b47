from sqlalchemy.ext.asyncio import AsyncSession

from casebank.models.domain import OutboxEvent

RESTORE_COMPLETED = "restore.completed"


async def push_restore_completed(
    db: AsyncSession, restore_token: str, scope_id: int, actor_user_id: int, summary: dict
) -> OutboxEvent:
    """Queue a notification that a restore landed in ``scope_id``.

    Flushed with the restored rows so the event commits or rolls back with them.
    """
    row = OutboxEvent(
        event_type=RESTORE_COMPLETED,
        payload_json={
            "restoreToken": restore_token,
            "scopeId": scope_id,
            "actorUserId": actor_user_id,
            "inserted": summary["inserted"],
            "dropped": summary["dropped"],
            "filesRelinked": summary["filesRelinked"],
        },
        status="pending",
    )
    db.add(row)
    await db.flush()
    return row
