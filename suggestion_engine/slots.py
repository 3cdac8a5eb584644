"""Mapping between calendar timestamps and fixed 5-minute slot indices."""

from __future__ import annotations

from datetime import datetime, timedelta

from suggestion_engine.config import EngineConfig


class SlotModel:
    """Bidirectional timestamp <-> slot index conversion on a fixed epoch."""

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()

    @property
    def total_slots(self) -> int:
        return self.config.total_slots

    def to_slot(self, timestamp: datetime) -> int:
        """Return the slot containing ``timestamp``; negative before the epoch."""

        if timestamp.tzinfo is not None:
            timestamp = timestamp.replace(tzinfo=None)
        minutes = (timestamp - self.config.epoch) // timedelta(minutes=1)
        return minutes // self.config.slot_minutes

    def to_timestamp(self, slot: int) -> datetime:
        """Return the start minute of ``slot``."""

        return self.config.epoch + timedelta(minutes=int(slot) * self.config.slot_minutes)

    def clamp(self, slot: int) -> int:
        return max(0, min(self.total_slots - 1, int(slot)))

    def contains(self, slot: int) -> bool:
        return 0 <= slot < self.total_slots
