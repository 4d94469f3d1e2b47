import structlog

from casebank.core.constants import EntityKind, TextFormat
from casebank.restore.context import RunContext

logger = structlog.get_logger()


async def get_or_create_default_category(ctx: RunContext) -> int:
    """Return the id of the fallback root category that collects orphaned cases.

    Looked up by (scope, configured name, root parent) so repeated restores into
    the same scope keep sharing one record.
    """
    if ctx.default_category_id is not None:
        return ctx.default_category_id

    criteria = {
        "scope_id": ctx.destination_scope,
        "name": ctx.default_category_name,
        "parent_id": 0,
    }
    existing = await ctx.record_store.find(EntityKind.CATEGORY, criteria)
    if existing:
        category_id = int(existing["id"])
    else:
        category_id = await ctx.record_store.insert(
            EntityKind.CATEGORY,
            {
                **criteria,
                "description": "",
                "description_format": TextFormat.HTML,
                "sort_order": 0,
                "created_at": ctx.restored_at,
                "updated_at": ctx.restored_at,
            },
        )
        ctx.inserted[EntityKind.CATEGORY] += 1
        logger.info("default_category_created", category_id=category_id, scope_id=ctx.destination_scope)

    ctx.default_category_id = category_id
    return category_id
