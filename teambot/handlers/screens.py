"""Rendering of the six registration screens."""

from __future__ import annotations

from typing import Any

from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from teambot.forms import (
    ENTITIES,
    can_add,
    format_exhibitors,
    format_members,
    format_persons,
    format_summary,
)
from teambot.keyboards import (
    confirmation_keyboard,
    entity_keyboard,
    team_size_keyboard,
    welcome_keyboard,
)
from teambot.schemas import new_draft
from teambot.services.registration_api import SubmissionStatus
from teambot.services.steps import LAST_STEP, StepController
from teambot.states import STEP_STATES


SUCCESS_MESSAGE = "報名成功! 請查收電子郵件信箱進行驗證(每位成員)"
ERROR_MESSAGE = "出現未知的錯誤，請稍後再試一次"
LOADING_MESSAGE = "送出中，請稍候…"
CONFIRMATION_TITLE = "恭喜你完成表單的填寫，請點選下面的按鈕進行發送"


def get_draft(data: dict[str, Any]) -> dict[str, Any]:
    return data.get("form") or new_draft()


def _header(step: int) -> str:
    return f"步驟 {step}/{LAST_STEP}・{StepController(step).title}"


async def show_step(message: Message, state: FSMContext, step: int) -> None:
    """Switch the conversation to ``step`` and render its screen."""

    await state.set_state(STEP_STATES[step])
    await state.update_data(**StepController(step).to_data())
    data = await state.get_data()
    draft = get_draft(data)

    if step == 1:
        text = "歡迎報名！請輸入團隊名稱（2–30 個字）。"
        if draft.get("teamName"):
            text += f"\n目前的團隊名稱：{draft['teamName']}\n不需修改可直接按「下一頁」。"
        await message.answer(f"{_header(step)}\n{text}", reply_markup=welcome_keyboard())
    elif step == 2:
        current = draft.get("teamSize") or "尚未選擇"
        await message.answer(
            f"{_header(step)}\n請選擇參賽團隊人數。\n目前：{current}",
            reply_markup=team_size_keyboard(),
        )
    elif step == 3:
        await message.answer(
            f"{_header(step)}\n{format_members(draft)}",
            reply_markup=entity_keyboard("member", can_add=can_add(ENTITIES["member"], draft)),
        )
    elif step == 4:
        await message.answer(
            f"{_header(step)}\n{format_persons(draft)}\n沒有陪同人員可直接按「下一頁」。",
            reply_markup=entity_keyboard("person", can_add=can_add(ENTITIES["person"], draft)),
        )
    elif step == 5:
        await message.answer(
            f"{_header(step)}\n{format_exhibitors(draft)}\n沒有參展人可直接按「下一頁」。",
            reply_markup=entity_keyboard(
                "exhibitor", can_add=can_add(ENTITIES["exhibitor"], draft)
            ),
        )
    else:
        status = SubmissionStatus.from_data(data)
        text = f"{_header(step)}\n{CONFIRMATION_TITLE}\n\n{format_summary(draft)}"
        if status.error:
            text += f"\n\n{ERROR_MESSAGE}"
        await message.answer(
            text,
            reply_markup=confirmation_keyboard(can_submit=not status.success),
        )
