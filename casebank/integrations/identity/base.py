class UserResolver:
    """Translates a user id recorded in a backup into a user id of the destination."""

    name: str = "base"

    async def resolve_user(self, old_user_id: int) -> int | None:
        raise NotImplementedError
