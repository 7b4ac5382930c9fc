"""Question sets and text formatting for the registration conversation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from teambot.schemas import (
    GENDERS,
    GRADES,
    MAX_ACCOMPANYING_PERSONS,
    MAX_EXHIBITORS,
    T_SHIRT_SIZES,
    FieldError,
)
from teambot.services.validators import (
    optional_text,
    parse_birthday,
    validate_choice,
    validate_email,
    validate_identity_number,
    validate_phone,
    validate_required,
)


@dataclass(frozen=True)
class FieldPrompt:
    """One question asked while filling an entity."""

    name: str
    question: str
    check: Callable[[str], Any]
    options: tuple[str, ...] = ()
    optional: bool = False


@dataclass(frozen=True)
class Entity:
    key: str
    title: str
    fields: tuple[FieldPrompt, ...]
    collection: Optional[str] = None
    limit: Optional[int] = None


MEMBER_FIELDS = (
    FieldPrompt("name", "請輸入成員姓名。", lambda v: validate_required(v, "姓名必填")),
    FieldPrompt(
        "gender",
        "請選擇性別。",
        lambda v: validate_choice(v, GENDERS),
        options=GENDERS,
    ),
    FieldPrompt("school", "請輸入就讀學校。", lambda v: validate_required(v, "學校必填")),
    FieldPrompt(
        "grade",
        "請選擇年級（一／二／三年級）。",
        lambda v: validate_choice(v, GRADES),
        options=GRADES,
    ),
    FieldPrompt("identityNumber", "請輸入身份字號（10 碼）。", validate_identity_number),
    FieldPrompt("birthday", "請輸入生日，格式為 YYYY-MM-DD。", parse_birthday),
    FieldPrompt("email", "請輸入 Email。", validate_email),
    FieldPrompt(
        "phone",
        "請輸入手機號碼（10 碼，09 開頭）。",
        lambda v: validate_phone(v, "手機號碼"),
    ),
    FieldPrompt("allergies", "有無過敏？", optional_text, optional=True),
    FieldPrompt("specialDiseases", "有無特殊疾病？", optional_text, optional=True),
    FieldPrompt("remarks", "其他備註？", optional_text, optional=True),
    FieldPrompt(
        "tShirtSize",
        "請選擇 T 恤尺寸。",
        lambda v: validate_choice(v, T_SHIRT_SIZES),
        options=T_SHIRT_SIZES,
    ),
)

CONTACT_FIELDS = (
    FieldPrompt(
        "name",
        "請輸入緊急聯絡人姓名。",
        lambda v: validate_required(v, "緊急聯絡人姓名必填"),
    ),
    FieldPrompt(
        "relationship",
        "請輸入與成員的關係。",
        lambda v: validate_required(v, "關係必填"),
    ),
    FieldPrompt(
        "phone",
        "請輸入緊急聯絡人電話（10 碼，09 開頭）。",
        lambda v: validate_phone(v, "電話號碼"),
    ),
)

PERSON_FIELDS = (
    FieldPrompt("name", "請輸入陪同人員姓名。", lambda v: validate_required(v, "姓名必填")),
    FieldPrompt("email", "請輸入陪同人員 Email。", validate_email),
    FieldPrompt(
        "phone",
        "請輸入陪同人員電話（10 碼，09 開頭）。",
        lambda v: validate_phone(v, "電話號碼"),
    ),
)

EXHIBITOR_FIELDS = (
    FieldPrompt("name", "請輸入參展人姓名。", lambda v: validate_required(v, "姓名必填")),
    FieldPrompt(
        "email",
        "請輸入參展人 Email。",
        lambda v: validate_email(v, "Email 必填"),
    ),
)

ENTITIES = {
    "member": Entity("member", "團隊成員", MEMBER_FIELDS, collection="teamMembers"),
    "contact": Entity("contact", "緊急聯絡人", CONTACT_FIELDS),
    "person": Entity(
        "person",
        "陪同人員",
        PERSON_FIELDS,
        collection="accompanyingPersons",
        limit=MAX_ACCOMPANYING_PERSONS,
    ),
    "exhibitor": Entity(
        "exhibitor",
        "參展人",
        EXHIBITOR_FIELDS,
        collection="exhibitors",
        limit=MAX_EXHIBITORS,
    ),
}

FIELD_LABELS = {
    "teamName": "團隊名稱",
    "teamSize": "團隊人數",
    "teamMembers": "團隊成員",
    "accompanyingPersons": "陪同人員",
    "exhibitors": "參展人",
    "emergencyContacts": "緊急聯絡人",
    "name": "姓名",
    "gender": "性別",
    "school": "學校",
    "grade": "年級",
    "identityNumber": "身份字號",
    "birthday": "生日",
    "email": "Email",
    "phone": "電話",
    "relationship": "關係",
    "allergies": "過敏",
    "specialDiseases": "特殊疾病",
    "remarks": "備註",
    "tShirtSize": "T 恤尺寸",
}


def entity_limit(entity: Entity, draft: Mapping[str, Any]) -> Optional[int]:
    """How many entries of ``entity`` the draft may hold."""

    if entity.key == "member":
        try:
            return int(draft.get("teamSize") or 0) or None
        except ValueError:
            return None
    return entity.limit


def can_add(entity: Entity, draft: Mapping[str, Any]) -> bool:
    limit = entity_limit(entity, draft)
    if limit is None:
        return True
    return len(draft.get(entity.collection) or []) < limit


def describe_path(path: str) -> str:
    """Turn ``teamMembers.0.phone`` into ``團隊成員 #1 › 電話``."""

    labels: list[str] = []
    for part in path.split("."):
        if not part:
            continue
        if part.isdigit() and labels:
            labels[-1] = f"{labels[-1]} #{int(part) + 1}"
        else:
            labels.append(FIELD_LABELS.get(part, part))
    return " › ".join(labels) or "表單"


def format_errors(errors: Iterable[FieldError], limit: int = 10) -> str:
    errors = list(errors)
    lines = ["請修正以下欄位："]
    lines.extend(
        f"• {describe_path(error.path)}：{error.message}" for error in errors[:limit]
    )
    if len(errors) > limit:
        lines.append(f"…還有 {len(errors) - limit} 項")
    return "\n".join(lines)


def _people(items: Iterable[Mapping[str, Any]], describe: Callable[[Mapping[str, Any]], str]) -> list[str]:
    return [f"{index}. {describe(item)}" for index, item in enumerate(items, start=1)]


def format_members(draft: Mapping[str, Any]) -> str:
    members = draft.get("teamMembers") or []
    lines = [f"團隊成員：{len(members)} / {draft.get('teamSize') or '?'}"]
    lines.extend(
        _people(
            members,
            lambda m: f"{m.get('name')}（{m.get('school')}，{m.get('grade')}年級，"
            f"緊急聯絡人 {len(m.get('emergencyContacts') or [])} 位）",
        )
    )
    return "\n".join(lines)


def format_persons(draft: Mapping[str, Any]) -> str:
    persons = draft.get("accompanyingPersons") or []
    lines = [f"陪同人員：{len(persons)} / {MAX_ACCOMPANYING_PERSONS}"]
    lines.extend(_people(persons, lambda p: f"{p.get('name')}（{p.get('phone')}）"))
    return "\n".join(lines)


def format_exhibitors(draft: Mapping[str, Any]) -> str:
    exhibitors = draft.get("exhibitors") or []
    lines = [f"參展人：{len(exhibitors)} / {MAX_EXHIBITORS}"]
    lines.extend(_people(exhibitors, lambda e: f"{e.get('name')}（{e.get('email')}）"))
    return "\n".join(lines)


def format_summary(draft: Mapping[str, Any]) -> str:
    return "\n\n".join(
        [
            f"團隊名稱：{draft.get('teamName') or '—'}\n"
            f"團隊人數：{draft.get('teamSize') or '—'}",
            format_members(draft),
            format_persons(draft),
            format_exhibitors(draft),
        ]
    )
