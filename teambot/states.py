"""FSM states for the team registration flow."""

from aiogram.fsm.state import State, StatesGroup


class RegistrationStates(StatesGroup):
    """States of the registration wizard; the first six map to steps."""

    team_name = State()
    team_size = State()
    members = State()
    persons = State()
    exhibitors = State()
    confirmation = State()
    entity_field = State()
    more_contacts = State()
    submitting = State()


STEP_STATES = {
    1: RegistrationStates.team_name,
    2: RegistrationStates.team_size,
    3: RegistrationStates.members,
    4: RegistrationStates.persons,
    5: RegistrationStates.exhibitors,
    6: RegistrationStates.confirmation,
}
