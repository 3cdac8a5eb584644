"""Core data schema for the user state document."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import numpy as np

from suggestion_engine.config import EngineConfig
from suggestion_engine.errors import CorruptState


@dataclass
class ScheduledEvent:
    """A committed activity; ``duration`` is counted in slots."""

    action: str
    tag: str
    start: datetime
    duration: int
    repeat_rule: str = "none"

    def to_payload(self, slot_minutes: int = 5) -> dict:
        return {
            "action": self.action,
            "tag": self.tag,
            "start": self.start.isoformat(),
            "length_minutes": self.duration * slot_minutes,
            "repeat_rule": self.repeat_rule,
        }

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "tag": self.tag,
            "start": self.start.isoformat(),
            "duration": self.duration,
            "repeat_rule": self.repeat_rule,
        }

    @classmethod
    def from_dict(cls, item: dict) -> "ScheduledEvent":
        return cls(
            action=str(item["action"]),
            tag=str(item["tag"]),
            start=datetime.fromisoformat(item["start"]),
            duration=int(item["duration"]),
            repeat_rule=str(item.get("repeat_rule", "none")),
        )


@dataclass
class UserState:
    """The single persisted aggregate: schedule, learned fields and history."""

    probabilities: dict[str, np.ndarray]
    average_durations: dict[str, int]
    recent_slots: list[int]
    events: dict[str, ScheduledEvent] = field(default_factory=dict)
    occupancy: dict[int, str] = field(default_factory=dict)

    @classmethod
    def default(cls, config: EngineConfig | None = None) -> "UserState":
        config = config or EngineConfig()
        shape = (config.days_modeled, config.slots_per_day)
        return cls(
            probabilities={tag: np.full(shape, config.initial_probability) for tag in config.tags},
            average_durations={tag: config.default_duration_minutes for tag in config.tags},
            recent_slots=[0] * config.recent_window,
        )

    def copy(self) -> "UserState":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "probabilities": {tag: values.tolist() for tag, values in self.probabilities.items()},
            "average_durations": dict(self.average_durations),
            "recent_slots": list(self.recent_slots),
            "events": {event_id: event.to_dict() for event_id, event in self.events.items()},
            "occupancy": {str(slot): event_id for slot, event_id in sorted(self.occupancy.items())},
        }

    @classmethod
    def from_dict(cls, payload: dict, config: EngineConfig | None = None) -> "UserState":
        config = config or EngineConfig()
        shape = (config.days_modeled, config.slots_per_day)
        try:
            probabilities = {
                tag: np.asarray(values, dtype=float).reshape(shape)
                for tag, values in payload["probabilities"].items()
            }
            events = {event_id: ScheduledEvent.from_dict(item) for event_id, item in payload.get("events", {}).items()}
            occupancy = {int(slot): str(event_id) for slot, event_id in payload.get("occupancy", {}).items()}
            state = cls(
                probabilities=probabilities,
                average_durations={tag: int(value) for tag, value in payload["average_durations"].items()},
                recent_slots=[int(slot) for slot in payload["recent_slots"]],
                events=events,
                occupancy=occupancy,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise CorruptState("Stored user state is malformed") from exc

        if len(state.recent_slots) != config.recent_window:
            raise CorruptState("Stored recent-suggestion window has the wrong length", state.recent_slots)
        missing = sorted(tag for tag in config.tags if tag not in probabilities or tag not in state.average_durations)
        if missing:
            raise CorruptState("Stored user state is missing tags", missing)
        dangling = set(occupancy.values()) - set(events)
        if dangling:
            raise CorruptState("Stored schedule references unknown events", sorted(dangling))
        return state


@dataclass
class Suggestion:
    """A recommended start time for an activity."""

    tag: str
    start: datetime
    length_minutes: int
    repeat_rule: str = "none"

    def to_payload(self) -> dict:
        return {
            "tag": self.tag,
            "start": self.start.isoformat(),
            "length_minutes": self.length_minutes,
            "repeat_rule": self.repeat_rule,
        }
