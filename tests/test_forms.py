import pytest

from teambot.forms import (
    ENTITIES,
    MEMBER_FIELDS,
    can_add,
    describe_path,
    entity_limit,
    format_errors,
    format_summary,
)
from teambot.schemas import FieldError, TeamMember
from teambot.services.validators import ValidationException
from tests.factories import make_exhibitor, make_form, make_member, make_person


@pytest.mark.parametrize(
    "path,expected",
    [
        ("teamName", "團隊名稱"),
        ("teamMembers.0.phone", "團隊成員 #1 › 電話"),
        ("teamMembers.1.emergencyContacts.0.relationship", "團隊成員 #2 › 緊急聯絡人 #1 › 關係"),
        ("", "表單"),
    ],
)
def test_describe_path(path, expected):
    assert describe_path(path) == expected


def test_format_errors_truncates_long_lists():
    errors = [FieldError(path="exhibitors", message="最多 50 位參展人")] * 12

    text = format_errors(errors, limit=10)

    assert text.startswith("請修正以下欄位：")
    assert text.count("參展人：最多 50 位參展人") == 10
    assert text.endswith("…還有 2 項")


def test_member_limit_follows_team_size():
    member = ENTITIES["member"]

    assert entity_limit(member, {"teamSize": "3"}) == 3
    assert entity_limit(member, {}) is None
    assert can_add(member, make_form(teamSize="2"))
    assert not can_add(member, make_form(teamSize="1"))


def test_person_and_exhibitor_limits():
    assert can_add(ENTITIES["person"], make_form(accompanyingPersons=[make_person()]))
    assert not can_add(ENTITIES["person"], make_form(accompanyingPersons=[make_person()] * 2))
    assert not can_add(ENTITIES["exhibitor"], make_form(exhibitors=[make_exhibitor()] * 50))


def test_member_prompts_build_a_valid_member():
    answers = {
        "name": "王小明",
        "gender": "男",
        "school": "建國中學",
        "grade": "二",
        "identityNumber": "a123456789",
        "birthday": "2008/05/01",
        "email": "ming@gmail.com",
        "phone": "0912345678",
        "allergies": "-",
        "specialDiseases": "氣喘",
        "remarks": "無",
        "tShirtSize": "L",
    }
    member = {}
    for prompt in MEMBER_FIELDS:
        value = prompt.check(answers[prompt.name])
        if value is not None:
            member[prompt.name] = value

    assert member["identityNumber"] == "A123456789"
    assert member["birthday"] == "2008-05-01"
    assert "allergies" not in member
    assert member["specialDiseases"] == "氣喘"

    member["emergencyContacts"] = [{"name": "王媽媽", "relationship": "母子", "phone": "0911222333"}]
    TeamMember.model_validate(member)


def test_prompt_checks_use_schema_messages():
    phone_prompt = next(p for p in MEMBER_FIELDS if p.name == "phone")

    with pytest.raises(ValidationException) as exc_info:
        phone_prompt.check("01234567890")

    assert exc_info.value.messages == ["手機號碼必須為 10 碼", "手機號碼必須以 09 開頭"]


def test_format_summary_lists_every_section():
    text = format_summary(
        make_form(
            teamMembers=[make_member()],
            accompanyingPersons=[make_person()],
            exhibitors=[make_exhibitor()],
        )
    )

    assert "團隊名稱：飛躍隊" in text
    assert "團隊成員：1 / 1" in text
    assert "1. 王小明（建國中學，二年級，緊急聯絡人 1 位）" in text
    assert "陪同人員：1 / 2" in text
    assert "參展人：1 / 50" in text
