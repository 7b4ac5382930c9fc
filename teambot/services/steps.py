"""Linear step counter for the six screens of the registration flow."""

from __future__ import annotations

from typing import Any, Mapping


FIRST_STEP = 1
LAST_STEP = 6

STEP_TITLES = {
    1: "歡迎",
    2: "參賽團隊人數",
    3: "團隊成員",
    4: "陪同人員",
    5: "參展人",
    6: "確認送出",
}


class StepController:
    """Current step index with clamped next/previous transitions."""

    def __init__(self, step: int = FIRST_STEP) -> None:
        self.step = min(max(int(step), FIRST_STEP), LAST_STEP)

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "StepController":
        return cls(data.get("step", FIRST_STEP))

    def to_data(self) -> dict[str, int]:
        return {"step": self.step}

    @property
    def is_first(self) -> bool:
        return self.step == FIRST_STEP

    @property
    def is_last(self) -> bool:
        return self.step == LAST_STEP

    @property
    def title(self) -> str:
        return STEP_TITLES[self.step]

    def next_step(self) -> int:
        if self.step < LAST_STEP:
            self.step += 1
        return self.step

    def prev_step(self) -> int:
        if self.step > FIRST_STEP:
            self.step -= 1
        return self.step
