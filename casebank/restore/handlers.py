from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from casebank.core.constants import (
    ANSWERS_PATH,
    ATTEMPTS_PATH,
    CASES_PATH,
    CATEGORIES_PATH,
    QUESTIONS_PATH,
    RESPONSES_PATH,
    DiagnosticReason,
    EntityKind,
)
from casebank.core.errors import MalformedTreeError
from casebank.restore.context import RunContext
from casebank.restore.default_category import get_or_create_default_category
from casebank.schemas.backup import (
    AnswerElement,
    AttemptElement,
    CaseElement,
    CategoryElement,
    ElementKey,
    QuestionElement,
    ResponseElement,
)

logger = structlog.get_logger()

Ancestry = Mapping[EntityKind, int | None]


class ElementHandler:
    """Imports one element kind of the backup tree.

    ``handle`` returns the id of the row the element now lives in, or ``None``
    when the element was dropped.
    """

    kind: EntityKind
    path: str
    parent: EntityKind | None = None
    schema: type[BaseModel]

    def parse(self, attributes: Mapping[str, Any]) -> Any:
        """Validate an attribute bag.

        Raises ``MalformedTreeError`` when the element id itself is unusable and
        pydantic's ``ValidationError`` for any other bad field.
        """
        try:
            return self.schema.model_validate(dict(attributes))
        except ValidationError as exc:
            if any(err["loc"][:1] == ("id",) for err in exc.errors()):
                raise MalformedTreeError(self.path, "invalid attributes: id") from exc
            raise

    async def handle(self, ctx: RunContext, attributes: Mapping[str, Any], ancestry: Ancestry) -> int | None:
        try:
            element = self.parse(attributes)
        except ValidationError as exc:
            # Nothing is mapped for a dropped element, so its children resolve as orphans.
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
            ctx.note(
                self.kind,
                ElementKey.model_validate(dict(attributes)).id,
                DiagnosticReason.INVALID_ATTRIBUTES,
                detail=", ".join(fields),
                dropped=True,
            )
            return None
        return await self.import_element(ctx, element, ancestry)

    async def import_element(self, ctx: RunContext, element: Any, ancestry: Ancestry) -> int | None:
        raise NotImplementedError

    async def _insert(self, ctx: RunContext, record: dict[str, Any]) -> int:
        new_id = await ctx.record_store.insert(self.kind, record)
        ctx.inserted[self.kind] += 1
        return new_id


def resolve_parent(
    ctx: RunContext, ancestry: Ancestry, kind: EntityKind, old_parent_id: int
) -> int | None:
    """Nearest processed ancestor first, then the run's mapping for the backup's own key."""
    new_id = ancestry.get(kind)
    if new_id:
        return new_id
    return ctx.id_maps.get(kind, old_parent_id)


class CategoryHandler(ElementHandler):
    kind = EntityKind.CATEGORY
    path = CATEGORIES_PATH
    schema = CategoryElement

    async def import_element(self, ctx: RunContext, element: CategoryElement, ancestry: Ancestry) -> int:
        parent_id = 0
        if element.parent:
            mapped = ctx.id_maps.get(EntityKind.CATEGORY, element.parent)
            if mapped is None:
                ctx.note(
                    self.kind,
                    element.id,
                    DiagnosticReason.PARENT_UNRESOLVED,
                    detail=f"parent {element.parent} restored as root",
                )
            else:
                parent_id = mapped

        existing = await ctx.record_store.find(
            self.kind,
            {"scope_id": ctx.destination_scope, "name": element.name, "parent_id": parent_id},
        )
        if existing:
            new_id = int(existing["id"])
            ctx.reused_categories += 1
            logger.debug("category_reused", old_id=element.id, new_id=new_id)
        else:
            new_id = await self._insert(
                ctx,
                {
                    "scope_id": ctx.destination_scope,
                    "name": element.name,
                    "description": element.description,
                    "description_format": element.descriptionformat,
                    "parent_id": parent_id,
                    "sort_order": element.sortorder,
                    "created_at": ctx.restored_at,
                    "updated_at": ctx.restored_at,
                },
            )

        ctx.id_maps.put(self.kind, element.id, new_id)
        return new_id


class CaseHandler(ElementHandler):
    kind = EntityKind.CASE
    path = CASES_PATH
    schema = CaseElement

    async def import_element(self, ctx: RunContext, element: CaseElement, ancestry: Ancestry) -> int:
        category_id = ctx.id_maps.get(EntityKind.CATEGORY, element.categoryid)
        if category_id is None:
            category_id = await get_or_create_default_category(ctx)
            ctx.note(
                self.kind,
                element.id,
                DiagnosticReason.CATEGORY_FALLBACK,
                detail=f"category {element.categoryid} not in backup",
            )

        created_by = await ctx.user_resolver.resolve_user(element.createdby)
        if not created_by:
            created_by = ctx.actor_user_id
            ctx.note(
                self.kind,
                element.id,
                DiagnosticReason.CREATOR_FALLBACK,
                detail=f"user {element.createdby} unresolved",
            )

        new_id = await self._insert(
            ctx,
            {
                "category_id": category_id,
                "name": element.name,
                "statement": element.statement,
                "statement_format": element.statementformat,
                "status": element.status,
                "difficulty": element.difficulty,
                "tags": element.tags,
                "created_by": created_by,
                "created_at": ctx.restored_at,
                "updated_at": ctx.restored_at,
            },
        )
        ctx.id_maps.put(self.kind, element.id, new_id)
        ctx.id_maps.publish(self.kind, element.id, new_id)
        return new_id


class QuestionHandler(ElementHandler):
    kind = EntityKind.QUESTION
    path = QUESTIONS_PATH
    parent = EntityKind.CASE
    schema = QuestionElement

    async def import_element(self, ctx: RunContext, element: QuestionElement, ancestry: Ancestry) -> int | None:
        case_id = resolve_parent(ctx, ancestry, EntityKind.CASE, element.caseid)
        if not case_id:
            ctx.note(self.kind, element.id, DiagnosticReason.PARENT_UNRESOLVED, dropped=True)
            return None

        new_id = await self._insert(
            ctx,
            {
                "case_id": case_id,
                "question_text": element.questiontext,
                "question_text_format": element.questiontextformat,
                "qtype": element.qtype,
                "default_mark": element.defaultmark,
                "sort_order": element.sortorder,
                "general_feedback": element.generalfeedback,
                "general_feedback_format": element.generalfeedbackformat,
                "single": element.single,
                "shuffle_answers": element.shuffleanswers,
                "created_at": ctx.restored_at,
                "updated_at": ctx.restored_at,
            },
        )
        ctx.id_maps.put(self.kind, element.id, new_id)
        ctx.id_maps.publish(self.kind, element.id, new_id)
        return new_id


class AnswerHandler(ElementHandler):
    kind = EntityKind.ANSWER
    path = ANSWERS_PATH
    parent = EntityKind.QUESTION
    schema = AnswerElement

    async def import_element(self, ctx: RunContext, element: AnswerElement, ancestry: Ancestry) -> int | None:
        question_id = resolve_parent(ctx, ancestry, EntityKind.QUESTION, element.questionid)
        if not question_id:
            ctx.note(self.kind, element.id, DiagnosticReason.PARENT_UNRESOLVED, dropped=True)
            return None

        new_id = await self._insert(
            ctx,
            {
                "question_id": question_id,
                "answer_text": element.answer,
                "answer_format": element.answerformat,
                "fraction": element.fraction,
                "feedback": element.feedback,
                "feedback_format": element.feedbackformat,
                "sort_order": element.sortorder,
            },
        )
        ctx.id_maps.publish(self.kind, element.id, new_id)
        return new_id


class AttemptHandler(ElementHandler):
    kind = EntityKind.ATTEMPT
    path = ATTEMPTS_PATH
    parent = EntityKind.CASE
    schema = AttemptElement

    async def import_element(self, ctx: RunContext, element: AttemptElement, ancestry: Ancestry) -> int | None:
        case_id = resolve_parent(ctx, ancestry, EntityKind.CASE, element.caseid)
        if not case_id:
            ctx.note(self.kind, element.id, DiagnosticReason.PARENT_UNRESOLVED, dropped=True)
            return None

        # An attempt is never attributed to anyone but the user who made it.
        user_id = await ctx.user_resolver.resolve_user(element.userid)
        if not user_id:
            ctx.note(
                self.kind,
                element.id,
                DiagnosticReason.USER_UNRESOLVED,
                detail=f"user {element.userid} unresolved",
                dropped=True,
            )
            return None

        new_id = await self._insert(
            ctx,
            {
                "case_id": case_id,
                "user_id": user_id,
                "status": element.status,
                "score": element.score,
                "max_score": element.maxscore,
                "percentage": element.percentage,
                "time_started": element.timestarted,
                "time_finished": element.timefinished,
            },
        )
        ctx.id_maps.put(self.kind, element.id, new_id)
        return new_id


class ResponseHandler(ElementHandler):
    kind = EntityKind.RESPONSE
    path = RESPONSES_PATH
    parent = EntityKind.ATTEMPT
    schema = ResponseElement

    async def import_element(self, ctx: RunContext, element: ResponseElement, ancestry: Ancestry) -> int | None:
        attempt_id = resolve_parent(ctx, ancestry, EntityKind.ATTEMPT, element.attemptid)
        if not attempt_id:
            ctx.note(self.kind, element.id, DiagnosticReason.PARENT_UNRESOLVED, dropped=True)
            return None

        question_id = ctx.id_maps.get_published(EntityKind.QUESTION, element.questionid)
        if not question_id:
            question_id = ctx.id_maps.get(EntityKind.QUESTION, element.questionid)
        if not question_id:
            ctx.note(
                self.kind,
                element.id,
                DiagnosticReason.QUESTION_UNRESOLVED,
                detail=f"question {element.questionid} unresolved",
                dropped=True,
            )
            return None

        return await self._insert(
            ctx,
            {
                "attempt_id": attempt_id,
                "question_id": question_id,
                "response": element.response,
                "score": element.score,
                "is_correct": element.iscorrect,
            },
        )


CONTENT_HANDLERS: tuple[type[ElementHandler], ...] = (
    CategoryHandler,
    CaseHandler,
    QuestionHandler,
    AnswerHandler,
)
USER_DATA_HANDLERS: tuple[type[ElementHandler], ...] = (
    AttemptHandler,
    ResponseHandler,
)


def build_handlers(include_user_data: bool) -> dict[str, ElementHandler]:
    """Path registry for one run. User-data paths exist only when the run includes user data."""
    classes = CONTENT_HANDLERS + (USER_DATA_HANDLERS if include_user_data else ())
    return {cls.path: cls() for cls in classes}
