from collections.abc import Iterable, Mapping
from uuid import uuid4

import structlog
from prometheus_client import Counter
from sqlalchemy.ext.asyncio import AsyncSession

from casebank.core.config import get_settings
from casebank.events.outbox import push_restore_completed
from casebank.integrations.files.database import DatabaseFileRelinker
from casebank.integrations.identity.factory import get_user_resolver
from casebank.integrations.record_store.database import DatabaseRecordStore
from casebank.restore.context import RunContext
from casebank.restore.run import RestoreResult, RestoreRun
from casebank.restore.walker import ElementInput

logger = structlog.get_logger()

RESTORE_COUNTER = Counter("casebank_restores_total", "Restore runs by outcome", ["outcome"])
DROPPED_COUNTER = Counter("casebank_restore_dropped_total", "Backup elements dropped during restore", ["kind"])


class RestoreService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    async def restore(
        self,
        scope_id: int,
        actor_user_id: int,
        elements: Iterable[ElementInput],
        include_user_data: bool | None = None,
        same_site_users: bool | None = None,
        user_mapping: Mapping[int, int] | None = None,
        restore_token: str | None = None,
    ) -> dict:
        if include_user_data is None:
            include_user_data = self.settings.restore_include_user_data
        restore_token = restore_token or uuid4().hex
        structlog.contextvars.bind_contextvars(restore_token=restore_token)

        ctx = RunContext(
            record_store=DatabaseRecordStore(self.db),
            user_resolver=get_user_resolver(self.db, user_mapping, same_site_users),
            actor_user_id=actor_user_id,
            destination_scope=scope_id,
            include_user_data=include_user_data,
            default_category_name=self.settings.default_category_name,
        )
        run = RestoreRun(ctx, DatabaseFileRelinker(self.db, restore_token, scope_id))
        try:
            result = await run.execute(elements)
        except Exception:
            await self.db.rollback()
            RESTORE_COUNTER.labels(outcome="failed").inc()
            raise
        finally:
            structlog.contextvars.unbind_contextvars("restore_token")

        for kind, count in result.dropped.items():
            if count:
                DROPPED_COUNTER.labels(kind=kind.value).inc(count)
        output = self.serialize_result(restore_token, result)
        await push_restore_completed(self.db, restore_token, scope_id, actor_user_id, output)
        await self.db.commit()
        RESTORE_COUNTER.labels(outcome="complete").inc()
        return output

    def serialize_result(self, restore_token: str, result: RestoreResult) -> dict:
        return {
            "restoreToken": restore_token,
            "state": result.state.value,
            "inserted": {k.value: v for k, v in result.inserted.items()},
            "dropped": {k.value: v for k, v in result.dropped.items()},
            "reusedCategories": result.reused_categories,
            "skippedElements": result.skipped_elements,
            "filesRelinked": result.files_relinked,
            "diagnostics": [
                {
                    "kind": d.kind.value,
                    "oldId": d.old_id,
                    "reason": d.reason.value,
                    "detail": d.detail,
                }
                for d in result.diagnostics
            ],
        }
