"""Import scheduled events from a CSV file into the stored user state."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from suggestion_engine.adapters import csv_adapter
from suggestion_engine.adapters.json_store import JsonStateStore
from suggestion_engine.config import EngineConfig
from suggestion_engine.engine import SuggestionEngine


def main() -> None:
    parser = argparse.ArgumentParser(description="Import a CSV schedule into suggestion-engine state")
    parser.add_argument("--data", required=True, help="CSV with action,tag,start_date,length,repeats columns")
    parser.add_argument("--state", default="data/user_state.json", help="Path to the JSON state file")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = EngineConfig()
    engine = SuggestionEngine(JsonStateStore(args.state, config), config)
    engine.import_events(csv_adapter.parse(args.data, config))

    listing = [event.to_payload(config.slot_minutes) for event in engine.list_schedule()]
    print(json.dumps({"events": listing}, indent=2))


if __name__ == "__main__":
    main()
