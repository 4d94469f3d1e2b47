import asyncio
from datetime import UTC, datetime, timedelta

import structlog

from casebank.core.config import get_settings
from casebank.db.session import SessionLocal
from casebank.repositories.stored_file_repository import StoredFileRepository
from casebank.restore.walker import BackupElement
from casebank.services.restore_service import RestoreService
from casebank.tasks.celery_app import celery

logger = structlog.get_logger()


async def _restore(payload: dict) -> dict:
    async with SessionLocal() as db:
        return await RestoreService(db).restore(
            scope_id=int(payload["scope_id"]),
            actor_user_id=int(payload["actor_user_id"]),
            elements=[BackupElement(e["path"], e.get("attributes", {})) for e in payload["elements"]],
            include_user_data=payload.get("include_user_data"),
            same_site_users=payload.get("same_site_users"),
            user_mapping={int(k): int(v) for k, v in (payload.get("user_mapping") or {}).items()},
            restore_token=payload.get("restore_token"),
        )


async def _cleanup_staged(ttl_hours: int) -> int:
    cutoff = datetime.now(UTC) - timedelta(hours=ttl_hours)
    async with SessionLocal() as db:
        deleted = await StoredFileRepository(db).delete_staged_before(cutoff)
        await db.commit()
    return deleted


@celery.task(name="casebank.tasks.tasks.restore_backup")
def restore_backup(payload: dict) -> dict:
    return asyncio.run(_restore(payload))


@celery.task(name="casebank.tasks.tasks.cleanup_staged_files")
def cleanup_staged_files() -> dict:
    deleted = asyncio.run(_cleanup_staged(get_settings().staged_file_ttl_hours))
    logger.info("staged_files_cleaned", deleted=deleted)
    return {"ok": True, "deleted": deleted}
