"""Field rules shared by the registration schema and the chat prompts."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

import email_validator


PHONE_LENGTH = 10
PHONE_PREFIX = "09"
IDENTITY_NUMBER_LENGTH = 10
TEAM_NAME_MIN = 2
TEAM_NAME_MAX = 30

SKIP_MARKERS = {"", "-", "無", "沒有"}


class ValidationException(ValueError):
    """Validation failure carrying one or more user-facing messages."""

    def __init__(self, *messages: str) -> None:
        self.messages = list(messages)
        self.message = "\n".join(messages)
        super().__init__(self.message)


def validate_required(value: str | None, message: str) -> str:
    """Reject empty or whitespace-only answers."""

    if not value or not value.strip():
        raise ValidationException(message)
    return value.strip()


def validate_team_name(value: str | None) -> str:
    name = (value or "").strip()
    if len(name) < TEAM_NAME_MIN:
        raise ValidationException(f"團隊名稱至少 {TEAM_NAME_MIN} 個字")
    if len(name) > TEAM_NAME_MAX:
        raise ValidationException(f"團隊名稱最多 {TEAM_NAME_MAX} 個字")
    return name


def validate_phone(value: str | None, label: str = "電話號碼") -> str:
    """Check a 10 digit "09" phone number.

    Length and prefix are independent conditions of the same rule, so a value
    breaking both reports both messages.
    """

    phone = (value or "").strip()
    problems = []
    if len(phone) != PHONE_LENGTH:
        problems.append(f"{label}必須為 {PHONE_LENGTH} 碼")
    if not phone.startswith(PHONE_PREFIX):
        problems.append(f"{label}必須以 {PHONE_PREFIX} 開頭")
    if problems:
        raise ValidationException(*problems)
    return phone


def validate_email(value: str | None, required_message: str | None = None) -> str:
    """Check the e-mail syntax; ``required_message`` adds a separate empty check."""

    address = (value or "").strip()
    if required_message and not address:
        raise ValidationException(required_message)
    try:
        email_validator.validate_email(address, check_deliverability=False)
    except email_validator.EmailNotValidError as exc:
        raise ValidationException("Email 格式不正確") from exc
    return address


def validate_identity_number(value: str | None) -> str:
    number = (value or "").strip().upper()
    if len(number) != IDENTITY_NUMBER_LENGTH:
        raise ValidationException(f"身份字號必須為 {IDENTITY_NUMBER_LENGTH} 碼")
    return number


def validate_choice(value: str | None, options: Iterable[str]) -> str:
    choice = (value or "").strip()
    if choice not in tuple(options):
        raise ValidationException("請從選項中選擇")
    return choice


def parse_birthday(value: str | None) -> str:
    """Parse a birthday answer and return it as an ISO date string."""

    raw = (value or "").strip()
    if not raw:
        raise ValidationException("生日必填")

    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%d.%m.%Y"):
        try:
            parsed = datetime.strptime(raw, fmt).date()
            break
        except ValueError:
            continue
    else:  # no break
        raise ValidationException("無法辨識日期，請使用 YYYY-MM-DD 格式")

    if parsed > date.today():
        raise ValidationException("生日不可晚於今天")

    return parsed.isoformat()


def optional_text(value: str | None) -> str | None:
    """Return ``None`` for answers that mean "nothing to report"."""

    text = (value or "").strip()
    if text in SKIP_MARKERS:
        return None
    return text
