from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from casebank.core.constants import EntityKind
from casebank.core.errors import MalformedTreeError
from casebank.restore.context import RunContext
from casebank.restore.handlers import ElementHandler

logger = structlog.get_logger()


@dataclass(frozen=True)
class BackupElement:
    path: str
    attributes: Mapping[str, Any] = field(default_factory=dict)


ElementInput = BackupElement | tuple[str, Mapping[str, Any]]


class TreeWalker:
    """Feeds a pre-order element stream to the handler registered for each path.

    Children must arrive after the parent element that encloses them. The
    walker remembers, for every registered path, the outcome of the most recent
    element seen there; opening an element forgets everything below it.
    """

    def __init__(self, handlers: Mapping[str, ElementHandler]) -> None:
        self.handlers = dict(handlers)
        self.path_by_kind = {handler.kind: path for path, handler in self.handlers.items()}
        for path, handler in self.handlers.items():
            parent_path = self.path_by_kind.get(handler.parent) if handler.parent else None
            if handler.parent and (parent_path is None or not path.startswith(parent_path + "/")):
                raise MalformedTreeError(path, f"no {handler.parent.value} path encloses this element")
        self._open: dict[str, int | None] = {}
        self.skipped = 0

    async def walk(self, ctx: RunContext, elements: Iterable[ElementInput]) -> int:
        processed = 0
        for item in elements:
            element = self._coerce(item)
            handler = self.handlers.get(element.path)
            if handler is None:
                self.skipped += 1
                logger.debug("element_skipped", path=element.path)
                continue

            new_id = await handler.handle(ctx, element.attributes, self._ancestry(handler))
            self._enter(element.path, new_id)
            processed += 1
        return processed

    def _coerce(self, item: ElementInput) -> BackupElement:
        if not isinstance(item, BackupElement):
            try:
                path, attributes = item
            except (TypeError, ValueError) as exc:
                raise MalformedTreeError(repr(item)[:80], "expected a (path, attributes) pair") from exc
            item = BackupElement(path, attributes)
        if not isinstance(item.attributes, Mapping):
            raise MalformedTreeError(item.path, "attributes must be a mapping")
        return item

    def _ancestry(self, handler: ElementHandler) -> dict[EntityKind, int | None]:
        ancestry = {
            kind: self._open[path]
            for kind, path in self.path_by_kind.items()
            if path in self._open and handler.path.startswith(path + "/")
        }
        if handler.parent is not None and handler.parent not in ancestry:
            logger.debug("enclosing_element_missing", path=handler.path, parent=handler.parent.value)
        return ancestry

    def _enter(self, path: str, new_id: int | None) -> None:
        prefix = path + "/"
        for open_path in [p for p in self._open if p.startswith(prefix)]:
            del self._open[open_path]
        self._open[path] = new_id
