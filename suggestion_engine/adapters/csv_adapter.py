"""CSV adapter for bulk schedule import."""

from __future__ import annotations

import csv

from suggestion_engine.config import EngineConfig
from suggestion_engine.errors import MalformedInput
from suggestion_engine.schema import ScheduledEvent
from suggestion_engine.tagger import infer_tag
from suggestion_engine.adapters.params import parse_length, parse_timestamp

_REQUIRED_FIELDS = {"action", "start_date", "length"}


def _parse_row(row: dict, row_number: int, config: EngineConfig) -> ScheduledEvent:
    missing = sorted(field for field in _REQUIRED_FIELDS if not row.get(field))
    if missing:
        raise MalformedInput(f"Row {row_number}: missing required fields {missing}", row_number)

    try:
        start = parse_timestamp(row["start_date"])
        minutes = parse_length(row["length"])
    except MalformedInput as exc:
        raise MalformedInput(f"Row {row_number}: {exc}", exc.value) from exc

    action = row["action"].strip()
    tag = (row.get("tag") or "").strip() or infer_tag(action, config)
    if tag not in config.tags:
        raise MalformedInput(f"Row {row_number}: unknown tag '{tag}'", tag)

    return ScheduledEvent(
        action=action,
        tag=tag,
        start=start,
        duration=minutes // config.slot_minutes,
        repeat_rule=(row.get("repeats") or "none").strip(),
    )


def parse(file_path: str, config: EngineConfig | None = None) -> list[ScheduledEvent]:
    """Parse a CSV file of events; rows without a tag are tagged from their action."""

    config = config or EngineConfig()
    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []
        return [_parse_row(row, row_number, config) for row_number, row in enumerate(reader, start=2)]
