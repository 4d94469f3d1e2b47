import pytest

from casebank.integrations.identity.factory import get_user_resolver
from casebank.integrations.identity.mapped import MappedUserResolver
from casebank.integrations.identity.same_site import SameSiteUserResolver


@pytest.mark.asyncio
async def test_mapped_resolver_ignores_anonymous_and_missing_users():
    resolver = MappedUserResolver({"7": "42", 8: 0})

    assert await resolver.resolve_user(7) == 42
    assert await resolver.resolve_user(8) is None
    assert await resolver.resolve_user(9) is None
    assert await resolver.resolve_user(0) is None


@pytest.mark.asyncio
async def test_factory_picks_resolver(db):
    assert isinstance(get_user_resolver(db, {7: 42}), MappedUserResolver)
    assert isinstance(get_user_resolver(db, same_site=True), SameSiteUserResolver)
