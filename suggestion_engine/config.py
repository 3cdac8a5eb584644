"""Engine configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


DEFAULT_KEYWORDS = {
    "school": ("study", "essay", "test", "quiz", "evaluation", "exam", "learn", "school"),
    "work": ("meeting", "supervise", "report", "coworker"),
    "leisure": ("play", "fun", "enjoy", "relax", "day off"),
}


@dataclass(frozen=True)
class EngineConfig:
    """Time model, tag set and learning constants shared by all modules."""

    epoch: datetime = datetime(2021, 6, 6, 7, 0)
    days_modeled: int = 30
    slots_per_day: int = 288
    slot_minutes: int = 5

    tags: tuple[str, ...] = ("work", "school", "leisure", "task")
    keywords: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_KEYWORDS))
    punctuation: str = "-"
    fallback_tag: str = "task"

    default_duration_minutes: int = 30
    initial_probability: float = 0.5
    max_step: float = 0.3

    lookahead_slots: int = 2016  # 7 days
    recent_window: int = 9
    suggestions_per_window: int = 3
    uniform_offset: int = 6
    uniform_step: int = 3
    uniform_choices: int = 3

    storage_retries: int = 3
    seed: int | None = None

    @property
    def total_slots(self) -> int:
        return self.days_modeled * self.slots_per_day

    @property
    def neighbourhood(self) -> int:
        """Slots recorded per suggestion (the chosen slot and its neighbours)."""

        return self.recent_window // self.suggestions_per_window
