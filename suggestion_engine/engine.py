"""Suggestion engine: transactional operations over the stored user state."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, TypeVar

import numpy as np

from suggestion_engine.adapters.store import StateStore
from suggestion_engine.adjustment import adjust, update_average
from suggestion_engine.config import EngineConfig
from suggestion_engine.errors import PersistenceUnavailable, ResetFailed, UnknownTag
from suggestion_engine.fields import ProbabilityFieldStore
from suggestion_engine.inference import infer_start
from suggestion_engine.schedule import ScheduleStore
from suggestion_engine.schema import ScheduledEvent, Suggestion, UserState
from suggestion_engine.slots import SlotModel
from suggestion_engine.tagger import infer_tag

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SuggestionEngine:
    """Recommends start times and learns from feedback for one user.

    Every write is a single load -> transform -> save transaction guarded by
    a lock, so concurrent callers never interleave on the stored state.
    """

    def __init__(
        self,
        store: StateStore,
        config: EngineConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        self.store = store
        self.config = config or EngineConfig()
        self.slots = SlotModel(self.config)
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self._lock = threading.Lock()

    # -- storage ---------------------------------------------------------------

    def _with_retries(self, operation: Callable[[], T]) -> T:
        attempts = max(1, self.config.storage_retries)
        attempt = 1
        while True:
            try:
                return operation()
            except PersistenceUnavailable:
                if attempt >= attempts:
                    raise
                logger.warning("Storage unavailable (attempt %d/%d), retrying", attempt, attempts)
                attempt += 1

    def _load(self) -> UserState:
        return self._with_retries(lambda: self.store.load_or_default(self.config))

    def _transaction(self, op: Callable[[UserState], T]) -> T:
        with self._lock:
            state = self._load()
            result = op(state)
            self._with_retries(lambda: self.store.save(state))
        return result

    def _check_tag(self, tag: str) -> None:
        if tag not in self.config.tags:
            raise UnknownTag(tag)

    # -- operations ------------------------------------------------------------

    def suggest(self, action: str, before: datetime | None = None, after: datetime | None = None) -> Suggestion:
        """Tag ``action`` and pick its start time within ``[after, before]``."""

        tag = infer_tag(action, self.config)
        before_slot = self.slots.to_slot(before) if before is not None else None
        after_slot = self.slots.to_slot(after) if after is not None else None

        def op(state: UserState) -> Suggestion:
            slot, start = infer_start(state, tag, before_slot, after_slot, self.config, self.rng)
            length = state.average_durations.get(tag, self.config.default_duration_minutes)
            logger.info("Suggesting slot %d (%s) for %r tagged %s", slot, start.isoformat(), action, tag)
            return Suggestion(tag=tag, start=start, length_minutes=length)

        return self._transaction(op)

    def feedback(self, tag: str, start: datetime, length_minutes: int, accepted: bool) -> None:
        """Reshape ``tag``'s field around ``start`` and update its average length."""

        self._check_tag(tag)
        index = self.slots.clamp(self.slots.to_slot(start))

        def op(state: UserState) -> None:
            fields = ProbabilityFieldStore(state.probabilities, self.config)
            fields.replace(tag, adjust(fields.read(tag), index, accepted, self.config.max_step))
            state.average_durations[tag] = update_average(
                state.average_durations.get(tag, self.config.default_duration_minutes), length_minutes
            )

        self._transaction(op)
        logger.info("Recorded %s feedback for %s at slot %d", "positive" if accepted else "negative", tag, index)

    def commit(self, action: str, tag: str, start: datetime, length_minutes: int, repeat_rule: str = "none") -> str:
        """Add an event to the schedule and return its id."""

        self._check_tag(tag)
        duration = length_minutes // self.config.slot_minutes

        def op(state: UserState) -> str:
            return ScheduleStore(state, self.slots).commit(action, tag, start, duration, repeat_rule)

        event_id = self._transaction(op)
        logger.info("Committed %r (%s) at %s for %d slots", action, tag, start.isoformat(), duration)
        return event_id

    def import_events(self, events: list[ScheduledEvent]) -> int:
        """Commit several events in one transaction."""

        for event in events:
            self._check_tag(event.tag)

        def op(state: UserState) -> int:
            schedule = ScheduleStore(state, self.slots)
            for event in events:
                schedule.commit(event.action, event.tag, event.start, event.duration, event.repeat_rule)
            return len(events)

        count = self._transaction(op)
        logger.info("Imported %d events", count)
        return count

    def list_schedule(self) -> list[ScheduledEvent]:
        return ScheduleStore(self._load(), self.slots).list_events()

    def probabilities(self, tag: str) -> np.ndarray:
        """Return a snapshot of ``tag``'s flattened field."""

        self._check_tag(tag)
        return ProbabilityFieldStore(self._load().probabilities, self.config).read(tag)

    def average_duration(self, tag: str) -> int:
        self._check_tag(tag)
        return self._load().average_durations.get(tag, self.config.default_duration_minutes)

    def recent_slots(self) -> list[int]:
        return list(self._load().recent_slots)

    def reset(self) -> int:
        with self._lock:
            removed = self._with_retries(self.store.reset)
        if removed < 1:
            raise ResetFailed("Failed to reset stored state")
        logger.info("Reset stored state (%d removed)", removed)
        return removed
