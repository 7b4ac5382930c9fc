from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.base import StorageKey
from aiogram.fsm.storage.memory import MemoryStorage

from teambot.handlers.entities import add_entity, answer_field, contacts_done
from teambot.handlers.registration import (
    cmd_start,
    handle_next,
    handle_prev,
    handle_team_name,
    handle_team_size,
    submit_registration,
)
from teambot.handlers.screens import ERROR_MESSAGE, SUCCESS_MESSAGE
from teambot.services.registration_api import SubmissionStatus
from teambot.states import RegistrationStates
from tests.factories import make_form


@pytest.fixture
def state() -> FSMContext:
    return FSMContext(
        storage=MemoryStorage(),
        key=StorageKey(bot_id=1, chat_id=1, user_id=1),
    )


def make_message(text: str | None = None) -> AsyncMock:
    message = AsyncMock()
    message.text = text
    return message


def make_callback(data: str) -> AsyncMock:
    callback = AsyncMock()
    callback.data = data
    callback.message = make_message()
    return callback


def answered(message: AsyncMock) -> list[str]:
    return [call.args[0] for call in message.answer.await_args_list]


@pytest.mark.asyncio
async def test_start_shows_welcome_screen(state):
    message = make_message("/start")

    await cmd_start(message, state)

    assert await state.get_state() == RegistrationStates.team_name.state
    data = await state.get_data()
    assert data["step"] == 1
    assert data["form"]["teamMembers"] == []
    assert "步驟 1/6" in answered(message)[-1]


@pytest.mark.asyncio
async def test_team_name_validated_then_advances(state):
    await cmd_start(make_message(), state)

    short = make_message("隊")
    await handle_team_name(short, state)
    assert answered(short) == ["團隊名稱至少 2 個字"]
    assert await state.get_state() == RegistrationStates.team_name.state

    ok = make_message("飛躍隊")
    await handle_team_name(ok, state)
    data = await state.get_data()
    assert data["form"]["teamName"] == "飛躍隊"
    assert data["step"] == 2
    assert await state.get_state() == RegistrationStates.team_size.state


@pytest.mark.asyncio
async def test_next_is_blocked_by_step_errors(state):
    await cmd_start(make_message(), state)
    callback = make_callback("nav:next")

    await handle_next(callback, state)

    assert "團隊名稱至少 2 個字" in answered(callback.message)[-1]
    assert (await state.get_data())["step"] == 1


@pytest.mark.asyncio
async def test_navigation_keeps_entered_data(state):
    await cmd_start(make_message(), state)
    await handle_team_name(make_message("飛躍隊"), state)
    await handle_team_size(make_callback("size:2"), state)

    assert (await state.get_data())["step"] == 3

    await handle_prev(make_callback("nav:prev"), state)
    await handle_prev(make_callback("nav:prev"), state)
    data = await state.get_data()
    assert data["step"] == 1
    assert data["form"]["teamName"] == "飛躍隊"
    assert data["form"]["teamSize"] == "2"

    await handle_next(make_callback("nav:next"), state)
    assert (await state.get_data())["step"] == 2


@pytest.mark.asyncio
async def test_adding_a_member_walks_member_and_contact_fields(state):
    await state.set_state(RegistrationStates.members)
    await state.update_data(step=3, form=make_form(teamSize="2", teamMembers=[]))

    await add_entity(make_callback("add:member"), state)
    assert await state.get_state() == RegistrationStates.entity_field.state

    answers = [
        "王小明", "男", "建國中學", "二", "A123456789", "2008-05-01",
        "ming@gmail.com", "0912345678", "-", "-", "-", "M",
        "王媽媽", "母子", "0911222333",
    ]
    for answer in answers:
        await answer_field(make_message(answer), state)

    assert await state.get_state() == RegistrationStates.more_contacts.state

    await contacts_done(make_callback("contact:done"), state)

    data = await state.get_data()
    assert await state.get_state() == RegistrationStates.members.state
    member = data["form"]["teamMembers"][0]
    assert member["name"] == "王小明"
    assert "allergies" not in member
    assert member["emergencyContacts"] == [
        {"name": "王媽媽", "relationship": "母子", "phone": "0911222333"}
    ]


@pytest.mark.asyncio
async def test_invalid_answer_repeats_the_question(state):
    await state.set_state(RegistrationStates.persons)
    await state.update_data(step=4, form=make_form())
    await add_entity(make_callback("add:person"), state)

    await answer_field(make_message("李老師"), state)
    await answer_field(make_message("teacher@gmail.com"), state)
    bad = make_message("912345678")
    await answer_field(bad, state)

    assert "電話號碼必須為 10 碼" in answered(bad)[0]
    assert (await state.get_data())["field_index"] == 2


@pytest.mark.asyncio
async def test_submit_success_clears_state(state):
    await state.set_state(RegistrationStates.confirmation)
    await state.update_data(step=6, form=make_form())
    submitter = MagicMock()
    submitter.submit = AsyncMock(return_value=SubmissionStatus(success=True))
    callback = make_callback("submit")

    await submit_registration(callback, state, {"submitter": submitter, "admin_chat_id": None})

    submitter.submit.assert_awaited_once()
    assert SUCCESS_MESSAGE in answered(callback.message)
    assert await state.get_state() is None


@pytest.mark.asyncio
async def test_submit_error_returns_to_confirmation(state):
    await state.set_state(RegistrationStates.confirmation)
    await state.update_data(step=6, form=make_form())
    submitter = MagicMock()
    submitter.submit = AsyncMock(return_value=SubmissionStatus(error=True))
    callback = make_callback("submit")

    await submit_registration(callback, state, {"submitter": submitter})

    assert await state.get_state() == RegistrationStates.confirmation.state
    assert (await state.get_data())["submission"]["error"] is True
    assert ERROR_MESSAGE in answered(callback.message)[-1]


@pytest.mark.asyncio
async def test_submit_blocked_by_invalid_form(state):
    await state.set_state(RegistrationStates.confirmation)
    await state.update_data(step=6, form=make_form(teamMembers=[]))
    submitter = MagicMock()
    submitter.submit = AsyncMock()
    callback = make_callback("submit")

    await submit_registration(callback, state, {"submitter": submitter})

    submitter.submit.assert_not_awaited()
    assert "至少需要一位團隊成員" in answered(callback.message)[-1]
    assert await state.get_state() == RegistrationStates.confirmation.state
