"""Handlers for the step navigation, team fields and submission."""

from __future__ import annotations

import asyncio
from collections import defaultdict

from aiogram import F, Router
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command, CommandStart, StateFilter
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message, ReplyKeyboardRemove

from teambot.forms import format_errors
from teambot.handlers.screens import (
    LOADING_MESSAGE,
    SUCCESS_MESSAGE,
    get_draft,
    show_step,
)
from teambot.logging import bind_user, get_logger
from teambot.schemas import (
    TEAM_SIZE_OPTIONS,
    RegistrationForm,
    new_draft,
    step_errors,
    validate_registration,
)
from teambot.services.registration_api import RegistrationSubmitter, SubmissionStatus
from teambot.services.steps import FIRST_STEP, LAST_STEP, StepController
from teambot.services.validators import ValidationException, validate_team_name
from teambot.states import STEP_STATES, RegistrationStates


router = Router()
logger = get_logger(__name__)

SCREEN_STATES = StateFilter(*STEP_STATES.values())


@router.message(RegistrationStates.submitting)
async def submitting_message(message: Message) -> None:
    await message.answer(LOADING_MESSAGE)


@router.callback_query(RegistrationStates.submitting)
async def submitting_callback(callback: CallbackQuery) -> None:
    await callback.answer(LOADING_MESSAGE)


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext) -> None:
    await state.clear()
    await state.update_data(form=new_draft(), **SubmissionStatus().to_data())
    await show_step(message, state, FIRST_STEP)


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext) -> None:
    await state.clear()
    await message.answer(
        "已取消報名，填寫的資料已清除。想重新開始請輸入 /start。",
        reply_markup=ReplyKeyboardRemove(),
    )


@router.message(RegistrationStates.team_name, F.text, ~F.text.startswith("/"))
async def handle_team_name(message: Message, state: FSMContext) -> None:
    try:
        team_name = validate_team_name(message.text)
    except ValidationException as exc:
        await message.answer(exc.message)
        return

    data = await state.get_data()
    form = dict(get_draft(data))
    form["teamName"] = team_name
    await state.update_data(form=form)

    controller = StepController.from_data(data)
    await show_step(message, state, controller.next_step())


@router.callback_query(RegistrationStates.team_size, F.data.startswith("size:"))
async def handle_team_size(callback: CallbackQuery, state: FSMContext) -> None:
    await callback.answer()
    size = callback.data.split(":", 1)[1]
    if size not in TEAM_SIZE_OPTIONS:
        return

    data = await state.get_data()
    form = dict(get_draft(data))
    form["teamSize"] = size
    members = form.get("teamMembers") or []
    if len(members) > int(size):
        form["teamMembers"] = members[: int(size)]
        await callback.message.answer(
            f"團隊人數改為 {size} 人，已保留前 {size} 位成員。"
        )
    await state.update_data(form=form)

    controller = StepController.from_data(data)
    await show_step(callback.message, state, controller.next_step())


@router.callback_query(SCREEN_STATES, F.data == "nav:next")
async def handle_next(callback: CallbackQuery, state: FSMContext) -> None:
    await callback.answer()
    data = await state.get_data()
    controller = StepController.from_data(data)

    errors = step_errors(controller.step, get_draft(data))
    if errors:
        await callback.message.answer(format_errors(errors))
        return

    await show_step(callback.message, state, controller.next_step())


@router.callback_query(SCREEN_STATES, F.data == "nav:prev")
async def handle_prev(callback: CallbackQuery, state: FSMContext) -> None:
    await callback.answer()
    data = await state.get_data()
    controller = StepController.from_data(data)
    await show_step(callback.message, state, controller.prev_step())


@router.callback_query(RegistrationStates.confirmation, F.data == "submit")
async def submit_registration(
    callback: CallbackQuery,
    state: FSMContext,
    bot_data: dict,
) -> None:
    user_id = callback.from_user.id if callback.from_user else None
    lock = _submit_lock(bot_data, user_id)
    if lock.locked():
        await callback.answer(LOADING_MESSAGE)
        return

    async with lock:
        # The filter ran before the lock was taken; a second tap may get here
        # after the first one already moved the conversation on.
        if await state.get_state() != RegistrationStates.confirmation.state:
            await callback.answer(LOADING_MESSAGE)
            return
        await state.set_state(RegistrationStates.submitting)

        succeeded = False
        try:
            await callback.answer()
            data = await state.get_data()

            result = validate_registration(get_draft(data))
            if not result.ok:
                await callback.message.answer(format_errors(result.errors))
                return

            submitter: RegistrationSubmitter | None = bot_data.get("submitter")
            if submitter is None:
                logger.error("submitter_not_initialized")
                await callback.message.answer("發生內部錯誤，請稍後再試。")
                return

            bind_user(user_id)
            await callback.message.answer(LOADING_MESSAGE, reply_markup=ReplyKeyboardRemove())

            status = await submitter.submit(result.form, SubmissionStatus.from_data(data))
            await state.update_data(**status.to_data())

            if status.success:
                succeeded = True
                await callback.message.answer(SUCCESS_MESSAGE)
                await _notify_admin(callback, result.form, bot_data)
                return
        finally:
            if succeeded:
                await state.clear()
            else:
                await state.set_state(RegistrationStates.confirmation)

    await show_step(callback.message, state, LAST_STEP)


@router.message(SCREEN_STATES)
async def use_buttons(message: Message) -> None:
    await message.answer("請使用下方按鈕操作，或輸入 /cancel 取消報名。")


def _submit_lock(bot_data: dict, user_id: int | None) -> asyncio.Lock:
    locks = bot_data.setdefault("submit_locks", defaultdict(asyncio.Lock))
    return locks[user_id]


async def _notify_admin(
    callback: CallbackQuery,
    form: RegistrationForm,
    bot_data: dict,
) -> None:
    admin_chat_id = bot_data.get("admin_chat_id")
    if not admin_chat_id:
        return

    message = (
        "新的團隊報名。\n"
        f"團隊名稱：{form.teamName}\n"
        f"團隊人數：{form.teamSize}\n"
        f"成員：{len(form.teamMembers)} 位\n"
        f"陪同人員：{len(form.accompanyingPersons)} 位\n"
        f"參展人：{len(form.exhibitors)} 位"
    )
    if callback.from_user and callback.from_user.username:
        message += f"\nTelegram：@{callback.from_user.username}"

    try:
        await callback.bot.send_message(int(admin_chat_id), message)
    except TelegramAPIError as exc:
        logger.error("admin_notification_failed", error=str(exc))
