"""Committed events and the slots they occupy."""

from __future__ import annotations

import uuid
from datetime import datetime

from suggestion_engine.errors import MalformedInput
from suggestion_engine.schema import ScheduledEvent, UserState
from suggestion_engine.slots import SlotModel


class ScheduleStore:
    """One record per committed event plus a slot -> event id map.

    Listing walks the map in slot order, so an event spanning many slots is
    reported once.
    """

    def __init__(self, state: UserState, slots: SlotModel | None = None):
        self.state = state
        self.slots = slots or SlotModel()

    def commit(self, action: str, tag: str, start: datetime, duration_slots: int, repeat_rule: str = "none") -> str:
        """Store an event covering ``[start_slot, start_slot + duration_slots]``."""

        if duration_slots < 0:
            raise MalformedInput("Event length must not be negative", duration_slots)
        start_slot = self.slots.to_slot(start)
        if not self.slots.contains(start_slot):
            raise MalformedInput(f"Start {start.isoformat()} is outside the modeled month", start.isoformat())

        event_id = uuid.uuid4().hex
        self.state.events[event_id] = ScheduledEvent(action, tag, start, duration_slots, repeat_rule)
        last_slot = min(start_slot + duration_slots, self.slots.total_slots - 1)
        self._occupy(event_id, start_slot, last_slot)
        return event_id

    def _occupy(self, event_id: str, first: int, last: int) -> None:
        # Overlapping commits overwrite earlier occupancy; no conflict policy.
        for slot in range(first, last + 1):
            self.state.occupancy[slot] = event_id
        self._prune()

    def _prune(self) -> None:
        live = set(self.state.occupancy.values())
        for event_id in [event_id for event_id in self.state.events if event_id not in live]:
            del self.state.events[event_id]

    def event_at(self, slot: int) -> ScheduledEvent | None:
        event_id = self.state.occupancy.get(slot)
        return self.state.events.get(event_id) if event_id else None

    def timestamp_at(self, slot: int) -> datetime:
        """Return the start time of ``slot`` per the slot model."""

        return self.slots.to_timestamp(self.slots.clamp(slot))

    def list_events(self) -> list[ScheduledEvent]:
        """Return one event per distinct action, in first-slot order."""

        seen_actions: set[str] = set()
        listed: list[ScheduledEvent] = []
        for slot in sorted(self.state.occupancy):
            event = self.state.events[self.state.occupancy[slot]]
            if event.action in seen_actions:
                continue
            seen_actions.add(event.action)
            listed.append(event)
        return listed
