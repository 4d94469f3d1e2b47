from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from casebank.core.constants import CaseStatus, QuestionType
from casebank.schemas.backup import AttemptElement, CaseElement, CategoryElement, QuestionElement


def test_case_tags_accept_json_and_comma_lists():
    assert CaseElement(id=1, name="A", tags='["tort", " duty "]').tags == ["tort", "duty"]
    assert CaseElement(id=1, name="A", tags="tort, duty,,").tags == ["tort", "duty"]
    assert CaseElement(id=1, name="A", tags="").tags == []


@pytest.mark.parametrize("raw", ["[broken", '["unterminated', 7])
def test_case_tags_that_cannot_be_read_are_empty(raw):
    assert CaseElement(id=1, name="A", tags=raw).tags == []


def test_case_unknown_status_becomes_draft():
    assert CaseElement(id=1, name="A", status="retired").status == CaseStatus.DRAFT
    assert CaseElement(id=1, name="A", status="in_review").status == CaseStatus.IN_REVIEW
    assert CaseElement(id=1, name="A", status=["published"]).status == CaseStatus.DRAFT
    assert CaseElement(id=1, name="A", status={"value": "published"}).status == CaseStatus.DRAFT


@pytest.mark.parametrize("raw,expected", [("-2", 0), ("3", 3), ("9", 5), ("", 0), ("hard", 0), (None, 0)])
def test_case_difficulty_is_clamped(raw, expected):
    assert CaseElement(id=1, name="A", difficulty=raw).difficulty == expected


def test_question_flags_are_coerced_from_strings():
    element = QuestionElement.model_validate(
        {"id": "100", "caseid": "50", "qtype": "truefalse", "single": "0", "shuffleanswers": "1", "defaultmark": "2.5000000"}
    )
    assert element.id == 100
    assert element.qtype == QuestionType.TRUEFALSE
    assert element.single is False
    assert element.shuffleanswers is True
    assert element.defaultmark == 2.5


def test_question_unknown_qtype_is_rejected():
    with pytest.raises(ValidationError):
        QuestionElement.model_validate({"id": "100", "qtype": "essay"})


def test_category_name_is_required_and_kept_verbatim():
    assert CategoryElement.model_validate({"id": "1", "name": "  Torts "}).name == "  Torts "
    with pytest.raises(ValidationError):
        CategoryElement.model_validate({"id": "1"})


def test_attempt_times_come_from_epoch_seconds():
    element = AttemptElement.model_validate({"id": "5", "timestarted": "1700000000", "timefinished": "0"})
    assert element.timestarted == datetime.fromtimestamp(1700000000, tz=UTC)
    assert element.timefinished is None
