from collections.abc import Mapping

from casebank.core.constants import EntityKind


class FileRelinker:
    name: str = "base"

    async def relink(self, entity_kind: EntityKind, file_area: str, mapping: Mapping[int, int]) -> int:
        """Move files recorded against old ids onto the new ids; returns the number of files moved."""
        raise NotImplementedError
