from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from casebank.core.constants import DiagnosticReason, EntityKind
from casebank.integrations.identity.base import UserResolver
from casebank.integrations.record_store.base import RecordStore
from casebank.restore.id_mapping import IdMappingStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class Diagnostic:
    kind: EntityKind
    old_id: int | None
    reason: DiagnosticReason
    detail: str = ""


@dataclass
class RunContext:
    record_store: RecordStore
    user_resolver: UserResolver
    actor_user_id: int
    destination_scope: int
    include_user_data: bool = False
    default_category_name: str = "Imported cases"
    id_maps: IdMappingStore = field(default_factory=IdMappingStore)
    restored_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    diagnostics: list[Diagnostic] = field(default_factory=list)
    inserted: dict[EntityKind, int] = field(default_factory=lambda: {kind: 0 for kind in EntityKind})
    dropped: dict[EntityKind, int] = field(default_factory=lambda: {kind: 0 for kind in EntityKind})
    reused_categories: int = 0
    default_category_id: int | None = None

    def note(
        self,
        kind: EntityKind,
        old_id: int | None,
        reason: DiagnosticReason,
        detail: str = "",
        dropped: bool = False,
    ) -> None:
        self.diagnostics.append(Diagnostic(kind=kind, old_id=old_id, reason=reason, detail=detail))
        if dropped:
            self.dropped[kind] += 1
        logger.info(
            f"{kind.value}_dropped" if dropped else f"{kind.value}_degraded",
            old_id=old_id,
            reason=reason.value,
            detail=detail,
        )
