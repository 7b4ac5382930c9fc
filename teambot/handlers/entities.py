"""Handlers filling team members, emergency contacts, persons and exhibitors."""

from __future__ import annotations

from typing import Any

from aiogram import F, Router
from aiogram.filters import StateFilter
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message, ReplyKeyboardRemove

from teambot.forms import ENTITIES, Entity, can_add
from teambot.handlers.screens import get_draft, show_step
from teambot.keyboards import more_contacts_keyboard, options_keyboard, skip_keyboard
from teambot.logging import get_logger
from teambot.services.steps import StepController
from teambot.services.validators import ValidationException
from teambot.states import RegistrationStates


router = Router()
logger = get_logger(__name__)

LIST_STATES = StateFilter(
    RegistrationStates.members,
    RegistrationStates.persons,
    RegistrationStates.exhibitors,
)


async def ask_field(message: Message, entity: Entity, index: int) -> None:
    prompt = entity.fields[index]
    question = f"{entity.title}・{prompt.question}"
    if prompt.options:
        markup = options_keyboard(prompt.options)
    elif prompt.optional:
        question += "（沒有請輸入「-」）"
        markup = skip_keyboard()
    else:
        markup = ReplyKeyboardRemove()
    await message.answer(question, reply_markup=markup)


async def start_entity(message: Message, state: FSMContext, entity_key: str) -> None:
    await state.set_state(RegistrationStates.entity_field)
    await state.update_data(entity=entity_key, field_index=0, entity_draft={})
    await ask_field(message, ENTITIES[entity_key], 0)


def _entity_from_callback(callback: CallbackQuery) -> Entity | None:
    key = (callback.data or "").split(":", 1)[-1]
    entity = ENTITIES.get(key)
    if entity is None or entity.collection is None:
        return None
    return entity


@router.callback_query(LIST_STATES, F.data.startswith("add:"))
async def add_entity(callback: CallbackQuery, state: FSMContext) -> None:
    await callback.answer()
    entity = _entity_from_callback(callback)
    if entity is None:
        return

    data = await state.get_data()
    if not can_add(entity, get_draft(data)):
        await callback.message.answer(f"{entity.title}已達人數上限。")
        return

    await start_entity(callback.message, state, entity.key)


@router.callback_query(LIST_STATES, F.data.startswith("clear:"))
async def clear_entities(callback: CallbackQuery, state: FSMContext) -> None:
    await callback.answer()
    entity = _entity_from_callback(callback)
    if entity is None:
        return

    data = await state.get_data()
    form = dict(get_draft(data))
    form[entity.collection] = []
    await state.update_data(form=form)
    await callback.message.answer(f"已清除所有{entity.title}。")
    await show_step(callback.message, state, StepController.from_data(data).step)


@router.message(RegistrationStates.entity_field, F.text)
async def answer_field(message: Message, state: FSMContext) -> None:
    data = await state.get_data()
    entity = ENTITIES[data["entity"]]
    index = data.get("field_index", 0)
    prompt = entity.fields[index]

    try:
        value = prompt.check(message.text or "")
    except ValidationException as exc:
        await message.answer(exc.message)
        return

    entity_draft = dict(data.get("entity_draft") or {})
    if value is not None:
        entity_draft[prompt.name] = value

    index += 1
    if index < len(entity.fields):
        await state.update_data(field_index=index, entity_draft=entity_draft)
        await ask_field(message, entity, index)
        return

    await finish_entity(message, state, entity, entity_draft)


@router.message(RegistrationStates.entity_field)
async def answer_field_not_text(message: Message) -> None:
    await message.answer("請以文字回覆。")


async def finish_entity(
    message: Message,
    state: FSMContext,
    entity: Entity,
    entity_draft: dict[str, Any],
) -> None:
    if entity.key == "member":
        entity_draft["emergencyContacts"] = []
        await state.update_data(member_draft=entity_draft)
        await message.answer(
            f"接下來請填寫 {entity_draft['name']} 的緊急聯絡人，至少需要一位。",
            reply_markup=ReplyKeyboardRemove(),
        )
        await start_entity(message, state, "contact")
        return

    if entity.key == "contact":
        data = await state.get_data()
        member = dict(data.get("member_draft") or {})
        member["emergencyContacts"] = [*member.get("emergencyContacts", []), entity_draft]
        await state.update_data(member_draft=member)
        await state.set_state(RegistrationStates.more_contacts)
        await message.answer(
            f"已新增緊急聯絡人 {entity_draft['name']}。",
            reply_markup=ReplyKeyboardRemove(),
        )
        await message.answer(
            "要再新增一位緊急聯絡人嗎？",
            reply_markup=more_contacts_keyboard(),
        )
        return

    await store_entity(message, state, entity, entity_draft)


@router.callback_query(RegistrationStates.more_contacts, F.data == "contact:more")
async def more_contacts(callback: CallbackQuery, state: FSMContext) -> None:
    await callback.answer()
    await start_entity(callback.message, state, "contact")


@router.callback_query(RegistrationStates.more_contacts, F.data == "contact:done")
async def contacts_done(callback: CallbackQuery, state: FSMContext) -> None:
    await callback.answer()
    data = await state.get_data()
    await store_entity(callback.message, state, ENTITIES["member"], data["member_draft"])


async def store_entity(
    message: Message,
    state: FSMContext,
    entity: Entity,
    item: dict[str, Any],
) -> None:
    """Append a finished entry to the draft and return to its screen."""

    data = await state.get_data()
    form = dict(get_draft(data))
    form[entity.collection] = [*(form.get(entity.collection) or []), item]
    await state.update_data(form=form, entity=None, entity_draft={}, member_draft=None)

    logger.info("registration_entity_added", entity=entity.key)
    await message.answer(
        f"已儲存{entity.title}：{item.get('name')}",
        reply_markup=ReplyKeyboardRemove(),
    )
    await show_step(message, state, StepController.from_data(data).step)
