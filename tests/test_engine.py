from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import numpy as np
import pytest

from suggestion_engine.adapters.memory_store import MemoryStateStore
from suggestion_engine.config import EngineConfig
from suggestion_engine.engine import SuggestionEngine
from suggestion_engine.errors import MalformedInput, PersistenceUnavailable, ResetFailed, UnknownTag

CONFIG = EngineConfig(seed=11)
EPOCH = CONFIG.epoch


class FlakyStore(MemoryStateStore):
    def __init__(self, failures):
        super().__init__()
        self.failures = failures
        self.calls = 0

    def load(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise PersistenceUnavailable("backend down")
        return super().load()


def make_engine(store=None):
    return SuggestionEngine(store or MemoryStateStore(), CONFIG)


def test_cold_start_suggestion():
    store = MemoryStateStore()
    engine = make_engine(store)
    suggestion = engine.suggest("I have a quiz tomorrow")
    assert suggestion.tag == "school"
    assert suggestion.length_minutes == 30
    assert suggestion.repeat_rule == "none"
    assert suggestion.start in {EPOCH + timedelta(minutes=5 * slot) for slot in (6, 9, 12)}
    assert store.load() is not None
    assert len(engine.recent_slots()) == 9


def test_suggestion_payload_shape():
    payload = make_engine().suggest("Relax").to_payload()
    assert set(payload) == {"tag", "start", "length_minutes", "repeat_rule"}
    assert payload["tag"] == "leisure"


def test_suggest_respects_after():
    engine = make_engine()
    suggestion = engine.suggest("Team meeting", after=EPOCH + timedelta(days=2))
    first_slot = 2 * 288
    assert suggestion.start in {EPOCH + timedelta(minutes=5 * (first_slot + o)) for o in (6, 9, 12)}


def test_feedback_learns_and_steers_suggestions():
    engine = make_engine()
    target = EPOCH + timedelta(days=1, hours=3)
    engine.feedback("work", target, 60, accepted=True)

    field = engine.probabilities("work")
    assert field.max() == pytest.approx(0.8)
    assert engine.average_duration("work") == 45

    suggestion = engine.suggest("Write the quarterly report")
    assert suggestion.tag == "work"
    assert suggestion.start == target
    assert suggestion.length_minutes == 45


def test_rejection_moves_next_suggestion():
    engine = make_engine()
    target = EPOCH + timedelta(hours=5)
    engine.feedback("work", target, 30, accepted=True)
    first = engine.suggest("meeting")
    engine.feedback("work", first.start, 30, accepted=False)
    second = engine.suggest("meeting")
    assert second.start != first.start


def test_unknown_tag_is_not_persisted():
    store = MemoryStateStore()
    engine = make_engine(store)
    with pytest.raises(UnknownTag):
        engine.feedback("chores", EPOCH, 30, accepted=True)
    with pytest.raises(UnknownTag):
        engine.commit("Sweep", "chores", EPOCH, 30)
    assert store.load() is None


def test_failed_commit_leaves_state_untouched():
    engine = make_engine()
    engine.commit("Gym", "leisure", EPOCH + timedelta(hours=2), 60, "weekly")
    with pytest.raises(MalformedInput):
        engine.commit("Trip", "leisure", EPOCH + timedelta(days=45), 60)
    assert [event.action for event in engine.list_schedule()] == ["Gym"]


def test_commit_then_list_deduplicates():
    engine = make_engine()
    engine.commit("Study chemistry", "school", EPOCH + timedelta(hours=1), 90, "none")
    engine.commit("Team sync", "work", EPOCH + timedelta(hours=4), 30, "weekly")
    listed = [event.to_payload() for event in engine.list_schedule()]
    assert listed == [
        {
            "action": "Study chemistry",
            "tag": "school",
            "start": (EPOCH + timedelta(hours=1)).isoformat(),
            "length_minutes": 90,
            "repeat_rule": "none",
        },
        {
            "action": "Team sync",
            "tag": "work",
            "start": (EPOCH + timedelta(hours=4)).isoformat(),
            "length_minutes": 30,
            "repeat_rule": "weekly",
        },
    ]


def test_storage_is_retried():
    store = FlakyStore(failures=2)
    engine = make_engine(store)
    engine.commit("Gym", "leisure", EPOCH, 30)
    assert store.calls == 3


def test_storage_failure_surfaces_after_retries():
    store = FlakyStore(failures=10)
    engine = make_engine(store)
    with pytest.raises(PersistenceUnavailable):
        engine.suggest("quiz")
    assert store.calls == CONFIG.storage_retries


def test_reset():
    engine = make_engine()
    with pytest.raises(ResetFailed):
        engine.reset()
    engine.commit("Gym", "leisure", EPOCH, 30)
    assert engine.reset() == 1
    assert engine.list_schedule() == []


def test_concurrent_feedback_stays_bounded():
    store = MemoryStateStore()
    engine = make_engine(store)
    jobs = [(EPOCH + timedelta(minutes=5 * (i % 7)), i % 3 != 0) for i in range(40)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda job: engine.feedback("work", job[0], 30, job[1]), jobs))

    field = engine.probabilities("work")
    assert np.all((field >= 0.0) & (field <= 1.0))
    assert not np.all(field == 0.5)
