"""Start-date inference from a tag's probability field."""

from __future__ import annotations

from datetime import datetime

import numpy as np

from suggestion_engine.config import EngineConfig
from suggestion_engine.errors import MalformedInput
from suggestion_engine.fields import ProbabilityFieldStore
from suggestion_engine.schedule import ScheduleStore
from suggestion_engine.schema import UserState
from suggestion_engine.slots import SlotModel

_RECENT_SCORE = -1.0


def search_window(before: int | None, after: int | None, config: EngineConfig) -> tuple[int, int]:
    """Return the clamped inclusive slot range ``[lo, hi]`` to search."""

    last = config.total_slots - 1
    lo = after if after is not None else 0
    hi = before if before is not None else lo + config.lookahead_slots
    lo, hi = max(0, min(last, lo)), max(0, min(last, hi))
    if lo > hi:
        raise MalformedInput("`by` must not be earlier than `after`", (before, after))
    return lo, hi


def best_slot(field: np.ndarray, lo: int, hi: int, recent) -> int:
    """Pick the highest-probability slot in ``[lo, hi]`` that was not recently suggested.

    When every candidate is recent, the recent candidate with the highest
    probability is returned instead.
    """

    candidates = np.asarray(field[lo : hi + 1], dtype=float)
    is_recent = np.isin(np.arange(lo, hi + 1), np.asarray(list(recent), dtype=int))
    if is_recent.all():
        return lo + int(np.argmax(candidates))
    scores = np.where(is_recent, _RECENT_SCORE, candidates)
    return lo + int(np.argmax(scores))


def record_suggestion(recent: list[int], slot: int, config: EngineConfig) -> list[int]:
    """Drop the oldest suggestion from the window and append ``slot`` with its neighbours."""

    width = config.neighbourhood
    half = width // 2
    appended = [slot + offset for offset in range(-half, width - half)]
    return (list(recent)[width:] + appended)[-config.recent_window :]


def choose_slot(
    fields: ProbabilityFieldStore,
    tag: str,
    recent: list[int],
    before: int | None,
    after: int | None,
    config: EngineConfig,
    rng: np.random.Generator,
) -> int:
    lo, hi = search_window(before, after, config)
    if fields.is_uniform(tag):
        slot = lo + config.uniform_offset + int(rng.integers(0, config.uniform_choices)) * config.uniform_step
    else:
        slot = best_slot(fields.read(tag), lo, hi, recent)
    return max(0, min(config.total_slots - 1, slot))


def infer_start(
    state: UserState,
    tag: str,
    before: int | None = None,
    after: int | None = None,
    config: EngineConfig | None = None,
    rng: np.random.Generator | None = None,
) -> tuple[int, datetime]:
    """Choose a start slot for ``tag`` and remember it in ``state``'s recent window.

    Returns the chosen slot and the timestamp the schedule records for it.
    """

    config = config or EngineConfig()
    rng = rng if rng is not None else np.random.default_rng(config.seed)
    fields = ProbabilityFieldStore(state.probabilities, config)

    slot = choose_slot(fields, tag, state.recent_slots, before, after, config, rng)
    state.recent_slots = record_suggestion(state.recent_slots, slot, config)

    schedule = ScheduleStore(state, SlotModel(config))
    return slot, schedule.timestamp_at(slot)
