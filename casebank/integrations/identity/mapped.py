from collections.abc import Mapping

from casebank.integrations.identity.base import UserResolver


class MappedUserResolver(UserResolver):
    name = "mapped"

    def __init__(self, mapping: Mapping[int, int]) -> None:
        self.mapping = {int(old): int(new) for old, new in mapping.items()}

    async def resolve_user(self, old_user_id: int) -> int | None:
        if old_user_id <= 0:
            return None
        new_id = self.mapping.get(old_user_id)
        if not new_id or new_id <= 0:
            return None
        return new_id
