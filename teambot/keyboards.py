"""Keyboards used by the registration screens."""

from __future__ import annotations

from aiogram.types import (
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
)
from aiogram.utils.keyboard import InlineKeyboardBuilder

from teambot.schemas import TEAM_SIZE_OPTIONS


BUTTON_PREV = "上一頁"
BUTTON_NEXT = "下一頁"
BUTTON_SUBMIT = "提交表單"

ENTITY_BUTTONS = {
    "member": "新增團隊成員",
    "person": "新增陪同人員",
    "exhibitor": "新增參展人",
}


def options_keyboard(options: tuple[str, ...]) -> ReplyKeyboardMarkup:
    row = [KeyboardButton(text=option) for option in options]
    return ReplyKeyboardMarkup(
        keyboard=[row[i : i + 4] for i in range(0, len(row), 4)],
        resize_keyboard=True,
        one_time_keyboard=True,
    )


def skip_keyboard() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text="-")]],
        resize_keyboard=True,
        one_time_keyboard=True,
    )


def _nav_buttons(builder: InlineKeyboardBuilder, *, prev: bool = True, next_: bool = True) -> None:
    if prev:
        builder.button(text=BUTTON_PREV, callback_data="nav:prev")
    if next_:
        builder.button(text=BUTTON_NEXT, callback_data="nav:next")


def welcome_keyboard() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    _nav_buttons(builder, prev=False)
    return builder.as_markup()


def team_size_keyboard() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    for size in TEAM_SIZE_OPTIONS:
        builder.button(text=f"{size} 人", callback_data=f"size:{size}")
    _nav_buttons(builder)
    builder.adjust(len(TEAM_SIZE_OPTIONS), 2)
    return builder.as_markup()


def entity_keyboard(entity_key: str, *, can_add: bool) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    if can_add:
        builder.button(text=ENTITY_BUTTONS[entity_key], callback_data=f"add:{entity_key}")
    builder.button(text="清除全部", callback_data=f"clear:{entity_key}")
    _nav_buttons(builder)
    builder.adjust(*([1] if can_add else []), 1, 2)
    return builder.as_markup()


def more_contacts_keyboard() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.button(text="再新增一位緊急聯絡人", callback_data="contact:more")
    builder.button(text="完成這位成員", callback_data="contact:done")
    builder.adjust(1)
    return builder.as_markup()


def confirmation_keyboard(*, can_submit: bool) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    if can_submit:
        builder.button(text=BUTTON_SUBMIT, callback_data="submit")
    _nav_buttons(builder, next_=False)
    builder.adjust(1)
    return builder.as_markup()
