"""Demo script for suggestion-engine."""

import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from suggestion_engine.adapters import csv_adapter
from suggestion_engine.adapters.memory_store import MemoryStateStore
from suggestion_engine.config import EngineConfig
from suggestion_engine.engine import SuggestionEngine


def main() -> None:
    config = EngineConfig(seed=7)
    engine = SuggestionEngine(MemoryStateStore(), config)
    engine.import_events(csv_adapter.parse("examples/sample_schedule.csv", config))

    first = engine.suggest("Study for the quiz")
    print("Cold start:", first.to_payload())

    engine.feedback(first.tag, datetime(2021, 6, 7, 19, 0), 60, accepted=True)
    engine.feedback(first.tag, first.start, first.length_minutes, accepted=False)

    for _ in range(3):
        print("Learned:", engine.suggest("Study for the quiz").to_payload())

    print("Recent window:", engine.recent_slots())
    print("Schedule:", [event.to_payload() for event in engine.list_schedule()])


if __name__ == "__main__":
    main()
