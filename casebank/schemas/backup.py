"""Attribute bags carried by each element of a backup tree.

Field names follow the backup format, so values arrive as the exporter wrote
them (frequently as strings) and are coerced here before they reach a handler.
"""

import json
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from casebank.core.constants import CaseStatus, QuestionType, TextFormat


class ElementKey(BaseModel):
    """Just the backup id, read on its own when the rest of a bag is unusable."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None


class BackupElementIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int


class CategoryElement(BackupElementIn):
    name: str = Field(min_length=1)
    description: str = ""
    descriptionformat: int = TextFormat.HTML
    parent: int = 0
    sortorder: int = 0


class CaseElement(BackupElementIn):
    categoryid: int = 0
    name: str = Field(min_length=1)
    statement: str = ""
    statementformat: int = TextFormat.HTML
    status: CaseStatus = CaseStatus.DRAFT
    difficulty: int = 0
    tags: list[str] = Field(default_factory=list)
    createdby: int = 0

    @field_validator("status", mode="before")
    @classmethod
    def known_status(cls, v):
        if isinstance(v, str) and v in {s.value for s in CaseStatus}:
            return v
        return CaseStatus.DRAFT

    @field_validator("difficulty", mode="before")
    @classmethod
    def clamp_difficulty(cls, v) -> int:
        try:
            return max(0, min(5, int(v)))
        except (TypeError, ValueError):
            return 0

    @field_validator("tags", mode="before")
    @classmethod
    def decode_tags(cls, v) -> list[str]:
        if not v:
            return []
        if isinstance(v, str):
            if v.lstrip().startswith("["):
                try:
                    decoded = json.loads(v)
                except json.JSONDecodeError:
                    return []
            else:
                decoded = v.split(",")
            if not isinstance(decoded, list):
                return []
            return [str(t).strip() for t in decoded if str(t).strip()]
        if not isinstance(v, (list, tuple)):
            return []
        return [str(t).strip() for t in v if str(t).strip()]


class QuestionElement(BackupElementIn):
    caseid: int = 0
    questiontext: str = ""
    questiontextformat: int = TextFormat.HTML
    qtype: QuestionType = QuestionType.MULTICHOICE
    defaultmark: float = Field(default=1.0, ge=0)
    sortorder: int = 0
    generalfeedback: str = ""
    generalfeedbackformat: int = TextFormat.HTML
    single: bool = True
    shuffleanswers: bool = True


class AnswerElement(BackupElementIn):
    questionid: int = 0
    answer: str = ""
    answerformat: int = TextFormat.HTML
    fraction: float = 0.0
    feedback: str = ""
    feedbackformat: int = TextFormat.HTML
    sortorder: int = 0


class AttemptElement(BackupElementIn):
    caseid: int = 0
    userid: int = 0
    status: str = "inprogress"
    score: float = 0.0
    maxscore: float = 0.0
    percentage: float = 0.0
    timestarted: datetime | None = None
    timefinished: datetime | None = None

    @field_validator("timestarted", "timefinished", mode="before")
    @classmethod
    def from_epoch(cls, v):
        if v in (None, "", 0, "0"):
            return None
        if isinstance(v, str) and v.isdigit():
            v = int(v)
        if isinstance(v, (int, float)):
            return datetime.fromtimestamp(v, tz=UTC)
        return v


class ResponseElement(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Responses are leaves and may be exported without an id of their own.
    id: int | None = None
    attemptid: int = 0
    questionid: int = 0
    response: str = ""
    score: float = 0.0
    iscorrect: bool = False
