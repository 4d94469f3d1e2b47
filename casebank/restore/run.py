from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from casebank.core.constants import EntityKind, RestoreState
from casebank.core.errors import RestoreStateError
from casebank.integrations.files.base import FileRelinker
from casebank.restore.context import Diagnostic, RunContext
from casebank.restore.file_relink import relink_files
from casebank.restore.handlers import build_handlers
from casebank.restore.walker import ElementInput, TreeWalker

logger = structlog.get_logger()


@dataclass
class RestoreResult:
    state: RestoreState
    inserted: dict[EntityKind, int]
    dropped: dict[EntityKind, int]
    reused_categories: int
    skipped_elements: int
    files_relinked: dict[str, int] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class RestoreRun:
    """One restore: pending -> tree_imported -> files_relinked -> complete.

    A run is single use. Structural failures leave it in ``failed`` and
    propagate to the caller, who owns any transaction rollback.
    """

    def __init__(self, ctx: RunContext, file_relinker: FileRelinker) -> None:
        self.ctx = ctx
        self.file_relinker = file_relinker
        self.state = RestoreState.PENDING
        self.walker = TreeWalker(build_handlers(ctx.include_user_data))

    async def execute(self, elements: Iterable[ElementInput]) -> RestoreResult:
        if self.state != RestoreState.PENDING:
            raise RestoreStateError(f"restore run already {self.state.value}")

        logger.info(
            "restore_started",
            scope_id=self.ctx.destination_scope,
            actor_user_id=self.ctx.actor_user_id,
            include_user_data=self.ctx.include_user_data,
        )
        try:
            await self.walker.walk(self.ctx, elements)
            self._advance(RestoreState.PENDING, RestoreState.TREE_IMPORTED)

            files = await relink_files(self.file_relinker, self.ctx.id_maps)
            self._advance(RestoreState.TREE_IMPORTED, RestoreState.FILES_RELINKED)
        except Exception as exc:
            logger.error("restore_failed", state=self.state.value, error=str(exc))
            self.state = RestoreState.FAILED
            raise

        self._advance(RestoreState.FILES_RELINKED, RestoreState.COMPLETE)
        result = RestoreResult(
            state=self.state,
            inserted=dict(self.ctx.inserted),
            dropped=dict(self.ctx.dropped),
            reused_categories=self.ctx.reused_categories,
            skipped_elements=self.walker.skipped,
            files_relinked=files,
            diagnostics=list(self.ctx.diagnostics),
        )
        logger.info(
            "restore_completed",
            inserted={k.value: v for k, v in result.inserted.items() if v},
            dropped={k.value: v for k, v in result.dropped.items() if v},
            reused_categories=result.reused_categories,
        )
        return result

    def _advance(self, expected: RestoreState, target: RestoreState) -> None:
        if self.state != expected:
            raise RestoreStateError(f"cannot move from {self.state.value} to {target.value}")
        self.state = target
