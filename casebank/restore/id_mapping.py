import structlog

from casebank.core.constants import MAPPED_KINDS, PUBLISHED_KINDS, EntityKind

logger = structlog.get_logger()


class IdMappingStore:
    """Old-id to new-id tables for one restore run.

    Every table is write-once per old id: the first mapping wins and later
    attempts to remap the same id are logged and ignored.
    """

    def __init__(self) -> None:
        self._private: dict[EntityKind, dict[int, int]] = {kind: {} for kind in MAPPED_KINDS}
        self._published: dict[EntityKind, dict[int, int]] = {kind: {} for kind in PUBLISHED_KINDS}

    def put(self, kind: EntityKind, old_id: int, new_id: int) -> bool:
        return self._write(self._private[kind], "private", kind, old_id, new_id)

    def get(self, kind: EntityKind, old_id: int | None) -> int | None:
        if old_id is None:
            return None
        return self._private[kind].get(old_id)

    def publish(self, kind: EntityKind, old_id: int, new_id: int) -> bool:
        return self._write(self._published[kind], "published", kind, old_id, new_id)

    def get_published(self, kind: EntityKind, old_id: int | None) -> int | None:
        if old_id is None:
            return None
        return self._published[kind].get(old_id)

    def published(self, kind: EntityKind) -> dict[int, int]:
        return dict(self._published[kind])

    def _write(
        self, table: dict[int, int], scope: str, kind: EntityKind, old_id: int, new_id: int
    ) -> bool:
        current = table.get(old_id)
        if current is not None:
            logger.warning(
                "id_mapping_conflict",
                table=scope,
                kind=kind.value,
                old_id=old_id,
                kept=current,
                ignored=new_id,
            )
            return False
        table[old_id] = new_id
        return True
