"""Data schemas for the team registration payload."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Literal, Mapping, Optional, get_args

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from teambot.services.validators import (
    ValidationException,
    validate_email,
    validate_identity_number,
    validate_phone,
    validate_required,
    validate_team_name,
)


Gender = Literal["男", "女", "其他"]
Grade = Literal["一", "二", "三"]
TShirtSize = Literal["S", "M", "L", "XL", "2L", "3L", "4L"]

GENDERS = get_args(Gender)
GRADES = get_args(Grade)
T_SHIRT_SIZES = get_args(TShirtSize)
TEAM_SIZE_OPTIONS = ("1", "2", "3", "4", "5")

MAX_ACCOMPANYING_PERSONS = 2
MAX_EXHIBITORS = 50

GENERIC_MESSAGES = {
    "missing": "此欄位必填",
    "literal_error": "請從選項中選擇",
}
FALLBACK_MESSAGE = "格式不正確"

# Fields owned by each step of the flow; step 6 checks everything.
STEP_FIELDS = {
    1: ("teamName",),
    2: ("teamSize",),
    3: ("teamMembers",),
    4: ("accompanyingPersons",),
    5: ("exhibitors",),
}


def _apply(rule: Callable[..., Any], *args: Any) -> Any:
    try:
        return rule(*args)
    except ValidationException as exc:
        raise PydanticCustomError(
            "field_rule",
            "{message}",
            {"message": exc.message, "messages": tuple(exc.messages)},
        ) from exc


def _reject(message: str) -> PydanticCustomError:
    return PydanticCustomError(
        "field_rule", "{message}", {"message": message, "messages": (message,)}
    )


class EmergencyContact(BaseModel):
    name: str
    relationship: str
    phone: str

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _apply(validate_required, value, "緊急聯絡人姓名必填")

    @field_validator("relationship")
    @classmethod
    def check_relationship(cls, value: str) -> str:
        return _apply(validate_required, value, "關係必填")

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return _apply(validate_phone, value, "電話號碼")


class AccompanyingPerson(BaseModel):
    id: Optional[str] = None
    name: str
    email: str
    phone: str

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _apply(validate_required, value, "姓名必填")

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _apply(validate_email, value)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return _apply(validate_phone, value, "電話號碼")


class TeamMember(BaseModel):
    name: str
    gender: Gender
    school: str
    grade: Grade
    identityNumber: str
    birthday: str
    email: str
    phone: str
    emergencyContacts: List[EmergencyContact] = Field(
        default_factory=list, validate_default=True
    )
    allergies: Optional[str] = None
    specialDiseases: Optional[str] = None
    remarks: Optional[str] = None
    tShirtSize: TShirtSize

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _apply(validate_required, value, "姓名必填")

    @field_validator("school")
    @classmethod
    def check_school(cls, value: str) -> str:
        return _apply(validate_required, value, "學校必填")

    @field_validator("identityNumber")
    @classmethod
    def check_identity_number(cls, value: str) -> str:
        return _apply(validate_identity_number, value)

    @field_validator("birthday")
    @classmethod
    def check_birthday(cls, value: str) -> str:
        return _apply(validate_required, value, "生日必填")

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _apply(validate_email, value)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return _apply(validate_phone, value, "手機號碼")

    @field_validator("emergencyContacts")
    @classmethod
    def check_emergency_contacts(
        cls, value: List[EmergencyContact]
    ) -> List[EmergencyContact]:
        if len(value) < 1:
            raise _reject("至少需要一位緊急聯絡人")
        return value


class Exhibitor(BaseModel):
    id: Optional[str] = None
    name: str
    email: str

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _apply(validate_required, value, "姓名必填")

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _apply(validate_email, value, "Email 必填")


class RegistrationForm(BaseModel):
    """Team registration payload posted to the API."""

    teamName: str = Field(default="", validate_default=True)
    teamSize: str = Field(default="", validate_default=True)
    teamMembers: List[TeamMember] = Field(default_factory=list, validate_default=True)
    accompanyingPersons: List[AccompanyingPerson] = Field(
        default_factory=list, validate_default=True
    )
    exhibitors: List[Exhibitor] = Field(default_factory=list, validate_default=True)

    @field_validator("teamName")
    @classmethod
    def check_team_name(cls, value: str) -> str:
        return _apply(validate_team_name, value)

    @field_validator("teamSize")
    @classmethod
    def check_team_size(cls, value: str) -> str:
        return _apply(validate_required, value, "請選擇參賽團隊人數")

    @field_validator("teamMembers")
    @classmethod
    def check_team_members(cls, value: List[TeamMember]) -> List[TeamMember]:
        if len(value) < 1:
            raise _reject("至少需要一位團隊成員")
        return value

    @field_validator("accompanyingPersons")
    @classmethod
    def check_accompanying_persons(
        cls, value: List[AccompanyingPerson]
    ) -> List[AccompanyingPerson]:
        if len(value) > MAX_ACCOMPANYING_PERSONS:
            raise _reject(f"最多 {MAX_ACCOMPANYING_PERSONS} 位陪伴人")
        return value

    @field_validator("exhibitors")
    @classmethod
    def check_exhibitors(cls, value: List[Exhibitor]) -> List[Exhibitor]:
        if len(value) > MAX_EXHIBITORS:
            raise _reject(f"最多 {MAX_EXHIBITORS} 位參展人")
        return value

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the API; unset optional fields are omitted."""
        return self.model_dump(mode="json", exclude_none=True)


@dataclass
class FieldError:
    path: str
    message: str


@dataclass
class ValidationResult:
    form: Optional[RegistrationForm] = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.form is not None


def new_draft() -> dict[str, Any]:
    """Initial form values when a user starts the flow."""
    return {
        "teamName": "",
        "teamMembers": [],
        "accompanyingPersons": [],
        "exhibitors": [],
    }


def collect_errors(exc: ValidationError) -> list[FieldError]:
    """Flatten a pydantic error into field-scoped messages."""

    errors: list[FieldError] = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"])
        ctx = error.get("ctx") or {}
        if error["type"] == "field_rule":
            messages = ctx.get("messages") or (error["msg"],)
        else:
            messages = (GENERIC_MESSAGES.get(error["type"], FALLBACK_MESSAGE),)
        errors.extend(FieldError(path=path, message=message) for message in messages)
    return errors


def validate_registration(candidate: Mapping[str, Any]) -> ValidationResult:
    """Validate a draft; violations are reported, never raised."""

    try:
        form = RegistrationForm.model_validate(candidate)
    except ValidationError as exc:
        return ValidationResult(errors=collect_errors(exc))
    return ValidationResult(form=form)


def step_errors(step: int, candidate: Mapping[str, Any]) -> list[FieldError]:
    """Return only the errors belonging to the fields of ``step``."""

    errors = validate_registration(candidate).errors
    fields = STEP_FIELDS.get(step)
    if fields is None:
        return errors
    return [
        error
        for error in errors
        if not error.path or error.path.split(".")[0] in fields
    ]
