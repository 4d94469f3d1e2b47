from enum import StrEnum


class EntityKind(StrEnum):
    CATEGORY = "category"
    CASE = "case"
    QUESTION = "question"
    ANSWER = "answer"
    ATTEMPT = "attempt"
    RESPONSE = "response"


class CaseStatus(StrEnum):
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class QuestionType(StrEnum):
    MULTICHOICE = "multichoice"
    TRUEFALSE = "truefalse"
    SHORTANSWER = "shortanswer"
    MATCHING = "matching"


class TextFormat:
    MOODLE = 0
    HTML = 1
    PLAIN = 2
    MARKDOWN = 4


class RestoreState(StrEnum):
    PENDING = "pending"
    TREE_IMPORTED = "tree_imported"
    FILES_RELINKED = "files_relinked"
    COMPLETE = "complete"
    FAILED = "failed"


class DiagnosticReason(StrEnum):
    PARENT_UNRESOLVED = "parent_unresolved"
    CATEGORY_FALLBACK = "category_fallback"
    USER_UNRESOLVED = "user_unresolved"
    CREATOR_FALLBACK = "creator_fallback"
    QUESTION_UNRESOLVED = "question_unresolved"
    INVALID_ATTRIBUTES = "invalid_attributes"


# Kinds that own a private old->new table for the duration of a run.
MAPPED_KINDS = (
    EntityKind.CATEGORY,
    EntityKind.CASE,
    EntityKind.QUESTION,
    EntityKind.ATTEMPT,
)

# Kinds whose mapping is shared with the file relinker and the response handler.
PUBLISHED_KINDS = (
    EntityKind.CASE,
    EntityKind.QUESTION,
    EntityKind.ANSWER,
)

FILE_AREAS: tuple[tuple[EntityKind, str], ...] = (
    (EntityKind.CASE, "statement"),
    (EntityKind.QUESTION, "questiontext"),
    (EntityKind.ANSWER, "answer"),
    (EntityKind.ANSWER, "feedback"),
)

CATEGORIES_PATH = "/categories/category"
CASES_PATH = "/cases/case"
QUESTIONS_PATH = "/cases/case/questions/question"
ANSWERS_PATH = "/cases/case/questions/question/answers/answer"
ATTEMPTS_PATH = "/cases/case/practice_attempts/attempt"
RESPONSES_PATH = "/cases/case/practice_attempts/attempt/responses/response"
