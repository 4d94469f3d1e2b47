from collections.abc import Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from casebank.core.config import get_settings
from casebank.integrations.identity.base import UserResolver
from casebank.integrations.identity.mapped import MappedUserResolver
from casebank.integrations.identity.same_site import SameSiteUserResolver


def get_user_resolver(
    db: AsyncSession,
    user_mapping: Mapping[int, int] | None = None,
    same_site: bool | None = None,
) -> UserResolver:
    settings = get_settings()
    if same_site is None:
        same_site = settings.restore_same_site_users
    if same_site:
        return SameSiteUserResolver(db)
    return MappedUserResolver(user_mapping or {})
